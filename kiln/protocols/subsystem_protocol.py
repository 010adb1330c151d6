"""Protocol definition for hardware-runner subsystems."""

from enum import Enum
from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from kiln.orchestration.context import RunContext


class Capability(str, Enum):
    """Routines a subsystem may expose to the orchestrator."""

    CHECK = "check"
    LINT = "lint"
    DOC = "doc"


@runtime_checkable
class SubsystemProtocol(Protocol):
    """A unit of the workspace with its own check, lint or doc routines."""

    name: str

    @property
    def capabilities(self) -> frozenset[Capability]:
        """Routines this subsystem declares."""
        ...

    def run(self, capability: Capability, context: "RunContext") -> None:
        """Run one routine.

        Raises:
            TaskError: If the routine fails
        """
        ...
