"""Result models for orchestrated steps and phases."""

from datetime import datetime

from pydantic import ConfigDict, Field, model_validator

from kiln.core.errors import KilnError
from kiln.core.structlog_logger import get_struct_logger
from kiln.models.base import KilnBaseModel


logger = get_struct_logger(__name__)


class BaseResult(KilnBaseModel):
    """Base class for all operation results."""

    success: bool
    timestamp: datetime = Field(default_factory=datetime.now)
    messages: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_success_consistency(self) -> "BaseResult":
        """Ensure success flag is consistent with errors."""
        if self.errors and self.success:
            logger.warning("result_success_mismatch", error_count=len(self.errors))
            object.__setattr__(self, "success", False)
        return self

    def add_error(self, error: str) -> None:
        """Add an error message and mark the result failed."""
        self.errors.append(error)
        self.success = False


class StepResult(BaseResult):
    """Outcome of a single orchestrated step."""

    name: str
    duration_seconds: float = 0.0
    outputs: list[str] = Field(default_factory=list)


class PhaseResult(BaseResult):
    """Outcome of running one phase.

    ``failed_step`` names the step that aborted the phase; the original
    exception is kept in ``error`` so callers can re-raise it unchanged.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    phase: str
    steps: list[StepResult] = Field(default_factory=list)
    failed_step: str | None = None
    error: KilnError | None = Field(default=None, exclude=True)

    @property
    def completed_steps(self) -> list[str]:
        """Names of steps that finished successfully."""
        return [step.name for step in self.steps if step.success]

    @property
    def outputs(self) -> list[str]:
        """Every output path produced by successful steps, in order."""
        return [output for step in self.steps if step.success for output in step.outputs]

    def raise_for_failure(self) -> None:
        """Re-raise the error that aborted the phase, if any."""
        if self.error is not None:
            raise self.error
