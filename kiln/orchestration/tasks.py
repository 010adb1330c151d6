"""Composable steps and subsystem tasks."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from pathlib import Path

from kiln.config.models import ProjectConfig, SubsystemConfig
from kiln.core.errors import ConfigurationError, TaskError
from kiln.core.structlog_logger import get_struct_logger
from kiln.orchestration.context import RunContext
from kiln.protocols import Capability, CommandRunnerProtocol, SubsystemProtocol
from kiln.utils.stream_process import (
    LoggerOutputMiddleware,
    format_diagnostic,
    run_command,
)


logger = get_struct_logger(__name__)

StepAction = Callable[[RunContext], Iterable[Path] | None]


@dataclass
class Step:
    """A named unit of work; the action returns the paths it produced.

    Steps sharing a ``lane`` never run concurrently with one another.
    """

    name: str
    action: StepAction
    lane: str | None = None

    def lane_key(self) -> str:
        return self.lane or self.name


@dataclass
class StepGroup:
    """Steps that may run concurrently when ``max_workers`` allows it."""

    name: str
    steps: list[Step] = field(default_factory=list)
    max_workers: int = 1


@dataclass
class PhasePlan:
    """Ordered stages of one phase."""

    phase: str
    stages: list[Step | StepGroup] = field(default_factory=list)

    def step_names(self) -> list[str]:
        names: list[str] = []
        for stage in self.stages:
            if isinstance(stage, StepGroup):
                names.extend(step.name for step in stage.steps)
            else:
                names.append(stage.name)
        return names


class CommandSubsystem:
    """A subsystem whose routines are external commands run in its directory."""

    def __init__(
        self, config: SubsystemConfig, runner: CommandRunnerProtocol | None = None
    ) -> None:
        self.name = config.name
        self.config = config
        self.runner = runner or run_command

    @property
    def capabilities(self) -> frozenset[Capability]:
        return frozenset(
            capability
            for capability in Capability
            if self.commands_for(capability)
        )

    def commands_for(self, capability: Capability) -> list[list[str]]:
        return list(getattr(self.config, Capability(capability).value))

    def run(self, capability: Capability, context: RunContext) -> None:
        commands = self.commands_for(capability)
        if not commands:
            raise ConfigurationError(
                f"Subsystem '{self.name}' has no {capability.value} routine",
                {"subsystem": self.name},
            )

        working_dir = context.resolve(self.config.path)
        log = logger.bind(subsystem=self.name, capability=capability.value)
        for cmd in commands:
            log.info("subsystem_command_started", command=cmd, cwd=str(working_dir))
            try:
                return_code, stdout, stderr = self.runner(
                    cmd, LoggerOutputMiddleware(log), cwd=working_dir
                )
            except OSError as e:
                raise TaskError(
                    self.name, capability.value, f"Cannot run command: {e}", command=cmd
                ) from e
            if return_code != 0:
                raise TaskError(
                    self.name,
                    capability.value,
                    format_diagnostic(stdout, stderr),
                    return_code=return_code,
                    command=cmd,
                )


class SubsystemRegistry:
    """Subsystems in registration order."""

    def __init__(self) -> None:
        self._subsystems: list[SubsystemProtocol] = []

    def register(self, subsystem: SubsystemProtocol) -> None:
        if any(s.name == subsystem.name for s in self._subsystems):
            raise ConfigurationError(
                f"Subsystem '{subsystem.name}' registered twice",
                {"subsystem": subsystem.name},
            )
        self._subsystems.append(subsystem)

    def all(self) -> list[SubsystemProtocol]:
        return list(self._subsystems)

    def providing(self, capability: Capability) -> list[SubsystemProtocol]:
        return [s for s in self._subsystems if capability in s.capabilities]

    @classmethod
    def from_config(
        cls, config: ProjectConfig, runner: CommandRunnerProtocol | None = None
    ) -> "SubsystemRegistry":
        """Register the workspace root first, then each configured subsystem."""
        registry = cls()
        if config.workspace.lint:
            registry.register(
                CommandSubsystem(
                    SubsystemConfig(name="workspace", lint=config.workspace.lint),
                    runner=runner,
                )
            )
        for subsystem in config.subsystems:
            registry.register(CommandSubsystem(subsystem, runner=runner))
        return registry


def subsystem_step(subsystem: SubsystemProtocol, capability: Capability) -> Step:
    """Wrap one subsystem routine as a step."""

    def action(context: RunContext) -> None:
        subsystem.run(capability, context)

    return Step(name=f"{capability.value}:{subsystem.name}", action=action)
