"""Protocol definition for version resolution."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class VersionProviderProtocol(Protocol):
    """Resolves the release version string."""

    def resolve_version(self, cwd: Path | None = None) -> str:
        """Return the version string.

        Raises:
            VersionResolutionError: If no version can be resolved
        """
        ...
