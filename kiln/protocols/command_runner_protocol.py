"""Protocol definition for running external commands."""

from collections.abc import Mapping
from pathlib import Path
from typing import Protocol, runtime_checkable

from kiln.utils.stream_process import OutputMiddleware, ProcessResult


@runtime_checkable
class CommandRunnerProtocol(Protocol):
    """Runs one external command to completion."""

    def __call__(
        self,
        cmd: str | list[str],
        middleware: OutputMiddleware[str] | None = None,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ProcessResult[str]:
        """Run ``cmd`` and return (return_code, stdout_lines, stderr_lines)."""
        ...
