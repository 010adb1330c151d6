"""Build matrix models: feature sets and build jobs."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from kiln.config.models import TargetConfig, VariantConfig
from kiln.core.errors import KilnError


@dataclass(frozen=True)
class FeatureSet:
    """Immutable set of feature flags.

    Duplicates collapse and order is irrelevant; iteration and rendering are
    sorted so the same set always produces the same toolchain arguments.
    """

    features: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, features: Iterable[str]) -> "FeatureSet":
        return cls(frozenset(f.strip() for f in features if f.strip()))

    def union(self, other: "FeatureSet") -> "FeatureSet":
        return FeatureSet(self.features | other.features)

    def __or__(self, other: "FeatureSet") -> "FeatureSet":
        return self.union(other)

    def __contains__(self, feature: object) -> bool:
        return feature in self.features

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.features))

    def __len__(self) -> int:
        return len(self.features)

    def render(self, separator: str = ",") -> str:
        """Render as a single toolchain argument."""
        return separator.join(self)


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


_TRANSITIONS = {
    JobState.PENDING: {JobState.RUNNING},
    JobState.RUNNING: {JobState.SUCCEEDED, JobState.FAILED},
    JobState.SUCCEEDED: set(),
    JobState.FAILED: set(),
}


@dataclass
class BuildJob:
    """One (target, variant) pairing to compile."""

    target: TargetConfig
    variant: VariantConfig
    state: JobState = JobState.PENDING

    @property
    def key(self) -> tuple[str, str]:
        return (self.target.id, self.variant.id)

    @property
    def name(self) -> str:
        return f"{self.target.id}/{self.variant.id}"

    @property
    def features(self) -> FeatureSet:
        """Composed feature set: target base features plus variant features."""
        return FeatureSet.of(self.target.features) | FeatureSet.of(
            self.variant.features
        )

    def transition(self, new_state: JobState) -> None:
        """Move to ``new_state``, refusing to leave a terminal state."""
        if new_state not in _TRANSITIONS[self.state]:
            raise KilnError(
                f"Invalid job state transition {self.state.value} -> "
                f"{new_state.value}",
                {"target": self.target.id, "variant": self.variant.id},
            )
        self.state = new_state
