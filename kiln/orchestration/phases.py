"""Build the ordered step plan for each phase."""

from dataclasses import dataclass
from pathlib import Path

from kiln.build.collector import ArtifactCollector
from kiln.build.driver import BuildDriver
from kiln.core.errors import ConfigurationError
from kiln.matrix.expander import MatrixExpander
from kiln.matrix.models import BuildJob
from kiln.metadata.service import MetadataService
from kiln.orchestration.context import RunContext
from kiln.orchestration.tasks import (
    PhasePlan,
    Step,
    StepGroup,
    SubsystemRegistry,
    subsystem_step,
)
from kiln.protocols import Capability


PHASES = ("check", "doc", "lint", "binaries")

_CAPABILITY_PHASES = {
    "check": Capability.CHECK,
    "doc": Capability.DOC,
    "lint": Capability.LINT,
}


@dataclass
class BinariesOptions:
    output_dir: Path | None = None
    jobs: int = 1
    metadata: bool | None = None


def build_step(job: BuildJob, driver: BuildDriver, collector: ArtifactCollector) -> Step:
    """Build one job and collect its artifact."""

    def action(context: RunContext) -> list[Path]:
        raw_path = driver.build(job)
        return [collector.collect(job, raw_path)]

    return Step(name=f"build:{job.name}", action=action, lane=job.target.id)


def metadata_steps(service: MetadataService) -> list[Step]:
    def license_report(context: RunContext) -> list[Path]:
        return [service.generate_license_report(context)]

    def command_doc(context: RunContext) -> list[Path]:
        return [service.generate_command_doc(context)]

    def manifest(context: RunContext) -> list[Path]:
        return [service.stamp_manifest(context)]

    return [
        Step(name="metadata:license", action=license_report),
        Step(name="metadata:commands", action=command_doc),
        Step(name="metadata:manifest", action=manifest),
    ]


class PhasePlanner:
    """Compose subsystem tasks, build jobs and metadata steps into plans."""

    def __init__(
        self,
        context: RunContext,
        registry: SubsystemRegistry | None = None,
        driver: BuildDriver | None = None,
        metadata_service: MetadataService | None = None,
    ) -> None:
        self.context = context
        self.registry = registry or SubsystemRegistry.from_config(context.config)
        self.driver = driver or BuildDriver(
            context.config,
            context.project_root,
            cache_strategy=context.settings.cache_strategy,
        )
        self.metadata_service = metadata_service or MetadataService()
        self.expander = MatrixExpander(context.config)

    def plan(self, phase: str, options: BinariesOptions | None = None) -> PhasePlan:
        if phase in _CAPABILITY_PHASES:
            return self.plan_subsystem_phase(phase)
        if phase == "binaries":
            return self.plan_binaries(options or BinariesOptions())
        raise ConfigurationError(f"Unknown phase '{phase}'", {"phase": phase})

    def plan_subsystem_phase(self, phase: str) -> PhasePlan:
        capability = _CAPABILITY_PHASES[phase]
        steps: list[Step | StepGroup] = [
            subsystem_step(subsystem, capability)
            for subsystem in self.registry.providing(capability)
        ]
        return PhasePlan(phase=phase, stages=steps)

    def plan_binaries(self, options: BinariesOptions) -> PhasePlan:
        phase_config = self.context.config.phases.binaries
        output_dir = self.context.resolve(options.output_dir or phase_config.output_dir)
        collector = ArtifactCollector(output_dir)

        jobs = self.expander.expand("binaries")
        stages: list[Step | StepGroup] = [
            StepGroup(
                name="builds",
                steps=[build_step(job, self.driver, collector) for job in jobs],
                max_workers=options.jobs,
            )
        ]

        include_metadata = (
            phase_config.metadata if options.metadata is None else options.metadata
        )
        if include_metadata:
            stages.append(
                StepGroup(
                    name="metadata",
                    steps=metadata_steps(self.metadata_service),
                    max_workers=3 if options.jobs > 1 else 1,
                )
            )
        return PhasePlan(phase="binaries", stages=stages)

    def plan_single_build(self, job: BuildJob, output_dir: Path | None = None) -> PhasePlan:
        """Plan for building and collecting exactly one job."""
        phase_config = self.context.config.phases.binaries
        collector = ArtifactCollector(
            self.context.resolve(output_dir or phase_config.output_dir)
        )
        return PhasePlan(phase="build", stages=[build_step(job, self.driver, collector)])
