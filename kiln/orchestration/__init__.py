"""Phase orchestration: run context, steps, subsystems and the orchestrator."""

from kiln.orchestration.context import RunContext
from kiln.orchestration.orchestrator import Orchestrator
from kiln.orchestration.tasks import (
    CommandSubsystem,
    PhasePlan,
    Step,
    StepGroup,
    SubsystemRegistry,
)


__all__ = [
    "CommandSubsystem",
    "Orchestrator",
    "PhasePlan",
    "RunContext",
    "Step",
    "StepGroup",
    "SubsystemRegistry",
]
