"""Version providers backed by version control."""

import subprocess
from pathlib import Path

from kiln.core.errors import VersionResolutionError
from kiln.core.structlog_logger import get_struct_logger


logger = get_struct_logger(__name__)


class GitVersionProvider:
    """Resolve the version with ``git describe --tags``.

    The result has the most-recent-tag-plus-distance form, for example
    ``v1.2.3-4-gabc1234``. A repository without any tag has no version.
    """

    def __init__(self, git_executable: str = "git", dirty_suffix: bool = False) -> None:
        self.git_executable = git_executable
        self.dirty_suffix = dirty_suffix

    def describe_command(self) -> list[str]:
        cmd = [self.git_executable, "describe", "--tags"]
        if self.dirty_suffix:
            cmd.append("--dirty")
        return cmd

    def resolve_version(self, cwd: Path | None = None) -> str:
        cmd = self.describe_command()
        try:
            result = subprocess.run(
                cmd, cwd=cwd, check=False, capture_output=True, text=True
            )
        except OSError as e:
            logger.error("git_not_runnable", executable=self.git_executable)
            raise VersionResolutionError(
                f"Cannot run {self.git_executable}", str(e)
            ) from e

        if result.returncode != 0:
            diagnostic = result.stderr.strip()
            logger.error("version_resolution_failed", diagnostic=diagnostic)
            raise VersionResolutionError(
                "No version-control tag could be resolved", diagnostic
            )

        version = result.stdout.strip()
        if not version:
            raise VersionResolutionError("git describe returned an empty version")

        logger.info("version_resolved", version=version)
        return version


class StaticVersionProvider:
    """Return a fixed version string."""

    def __init__(self, version: str) -> None:
        self.version = version

    def resolve_version(self, cwd: Path | None = None) -> str:
        if not self.version.strip():
            raise VersionResolutionError("Empty version override")
        return self.version


def create_version_provider(
    version: str | None = None, git_executable: str = "git"
) -> StaticVersionProvider | GitVersionProvider:
    """Create a version provider, preferring an explicit version override."""
    if version is not None:
        return StaticVersionProvider(version)
    return GitVersionProvider(git_executable=git_executable)
