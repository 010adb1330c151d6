"""Run context threaded through every step."""

from dataclasses import dataclass, field
from pathlib import Path

from kiln.config.models import ProjectConfig
from kiln.config.settings import KilnSettings


@dataclass(frozen=True)
class RunContext:
    """Explicit working directory and configuration for one invocation.

    Steps resolve every relative path against ``project_root`` instead of
    changing the process working directory.
    """

    project_root: Path
    config: ProjectConfig
    settings: KilnSettings = field(default_factory=KilnSettings)

    def resolve(self, path: Path | str) -> Path:
        """Resolve ``path`` relative to the project root."""
        path = Path(path)
        return path if path.is_absolute() else self.project_root / path
