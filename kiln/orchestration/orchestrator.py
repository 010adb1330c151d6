"""Fail-fast execution of phase plans."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from kiln.core.errors import KilnError
from kiln.core.structlog_logger import StructlogMixin
from kiln.models.results import PhaseResult, StepResult
from kiln.orchestration.context import RunContext
from kiln.orchestration.tasks import PhasePlan, Step, StepGroup


class PhaseAborted(Exception):
    """Internal signal raised when a step fails."""

    def __init__(self, step: Step, error: KilnError) -> None:
        super().__init__(str(error))
        self.step = step
        self.error = error


class Orchestrator(StructlogMixin):
    """Run the stages of a phase plan in declared order.

    The first failing step aborts the phase: later steps never start and
    nothing is retried. Outputs of completed steps stay where they are.
    """

    service_name = "orchestrator"

    def __init__(self, context: RunContext) -> None:
        super().__init__()
        self.context = context

    def run(self, plan: PhasePlan) -> PhaseResult:
        log = self.log_operation("run_phase", phase=plan.phase)
        result = PhaseResult(success=True, phase=plan.phase)
        log.info("phase_started", steps=plan.step_names())
        started = time.monotonic()

        try:
            for stage in plan.stages:
                if isinstance(stage, StepGroup):
                    self._run_group(plan.phase, stage, result)
                else:
                    self._record(result, self._run_step(plan.phase, stage))
        except PhaseAborted as aborted:
            aborted.error.add_context(phase=plan.phase, step=aborted.step.name)
            result.failed_step = aborted.step.name
            result.error = aborted.error
            result.add_error(str(aborted.error))
            self.log_error_with_context(
                "phase_failed",
                aborted.error,
                phase=plan.phase,
                step=aborted.step.name,
                diagnostic=aborted.error.context.get("diagnostic"),
            )
            return result

        log.info(
            "phase_succeeded",
            steps=len(result.steps),
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return result

    def _record(
        self, result: PhaseResult, outcome: tuple[StepResult, Step, KilnError | None]
    ) -> None:
        step_result, step, error = outcome
        result.steps.append(step_result)
        if error is not None:
            raise PhaseAborted(step, error)

    def _run_step(
        self, phase: str, step: Step
    ) -> tuple[StepResult, Step, KilnError | None]:
        log = self.logger.bind(phase=phase, step=step.name)
        log.info("step_started")
        started = time.monotonic()
        try:
            outputs = list(step.action(self.context) or [])
        except KilnError as e:
            duration = time.monotonic() - started
            step_result = StepResult(
                success=False,
                name=step.name,
                duration_seconds=duration,
                errors=[str(e)],
            )
            return step_result, step, e

        duration = time.monotonic() - started
        log.info("step_succeeded", duration_seconds=round(duration, 3))
        return (
            StepResult(
                success=True,
                name=step.name,
                duration_seconds=duration,
                outputs=[str(Path(p)) for p in outputs],
            ),
            step,
            None,
        )

    def _run_group(self, phase: str, group: StepGroup, result: PhaseResult) -> None:
        if group.max_workers <= 1 or len(group.steps) <= 1:
            for step in group.steps:
                self._record(result, self._run_step(phase, step))
            return

        lanes: dict[str, list[Step]] = {}
        for step in group.steps:
            lanes.setdefault(step.lane_key(), []).append(step)

        abort = threading.Event()
        outcomes: dict[str, tuple[StepResult, Step, KilnError | None]] = {}
        outcomes_lock = threading.Lock()

        def run_lane(steps: list[Step]) -> None:
            try:
                for step in steps:
                    if abort.is_set():
                        return
                    outcome = self._run_step(phase, step)
                    with outcomes_lock:
                        outcomes[step.name] = outcome
                    if outcome[2] is not None:
                        abort.set()
                        return
            except BaseException:
                abort.set()
                raise

        self.logger.debug(
            "group_started", group=group.name, lanes=list(lanes), workers=group.max_workers
        )
        with ThreadPoolExecutor(max_workers=group.max_workers) as executor:
            futures = [executor.submit(run_lane, steps) for steps in lanes.values()]
            for future in futures:
                future.result()

        # Declared order, not completion order
        for step in group.steps:
            if step.name in outcomes:
                self._record(result, outcomes[step.name])
