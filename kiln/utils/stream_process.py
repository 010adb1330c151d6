"""Process execution and streaming output handling.

This module runs subprocesses and hands every output line to a middleware
object as it arrives, so long toolchain runs can be logged in real time
while the output is still collected for diagnostics.

Example:
    ```python
    from kiln.utils.stream_process import run_command, LoggerOutputMiddleware

    return_code, stdout, stderr = run_command(
        ["make", "check"], LoggerOutputMiddleware(logger), cwd=Path("runners/nkpk")
    )
    ```
"""

import os
import shlex
import subprocess
from collections.abc import Mapping
from pathlib import Path
from threading import Thread
from typing import Any, Generic, TypeAlias, TypeVar, cast

import structlog


T = TypeVar("T")  # Type of processed output

# (return_code, stdout, stderr)
ProcessResult: TypeAlias = tuple[int, list[T], list[T]]


class OutputMiddleware(Generic[T]):
    """Base class for processing command output streams.

    Type parameter T represents the return type of the process method,
    allowing middleware to transform strings into other types if needed.
    """

    def process(self, line: str, stream_type: str) -> T:
        """Process a line of output from a subprocess stream.

        Args:
            line: A line of text from the process output
            stream_type: Either "stdout" or "stderr"

        Returns:
            Processed output of type T
        """
        raise NotImplementedError()


class CaptureOutputMiddleware(OutputMiddleware[str]):
    """Keep lines unchanged without printing them."""

    def process(self, line: str, stream_type: str) -> str:
        return line


class LoggerOutputMiddleware(OutputMiddleware[str]):
    """Log stdout lines at DEBUG and stderr lines at WARNING."""

    def __init__(
        self,
        logger: structlog.stdlib.BoundLogger,
        stdout_prefix: str = "",
        stderr_prefix: str = "",
    ) -> None:
        self.logger = logger
        self.stdout_prefix = stdout_prefix
        self.stderr_prefix = stderr_prefix

    def process(self, line: str, stream_type: str) -> str:
        if stream_type == "stdout":
            self.logger.debug(f"{self.stdout_prefix}{line}")
        else:
            self.logger.warning(f"{self.stderr_prefix}{line}")
        return line


def run_command(
    cmd: str | list[str],
    middleware: OutputMiddleware[T] | None = None,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ProcessResult[T]:
    """Run a command and process its output through middleware.

    Args:
        cmd: Command to run, either as a string or list of arguments
        middleware: Middleware for processing output (captures lines if None)
        cwd: Working directory for the process
        env: Extra environment variables merged over the current environment

    Returns:
        Tuple of return code, processed stdout lines and processed stderr lines

    Raises:
        OSError: If the executable cannot be started, e.g. FileNotFoundError
    """
    if middleware is None:
        middleware = cast(OutputMiddleware[T], CaptureOutputMiddleware())

    if isinstance(cmd, str):
        cmd = shlex.split(cmd)

    process_env = None
    if env:
        process_env = {**os.environ, **env}

    process = subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        bufsize=1,
        cwd=cwd,
        env=process_env,
    )

    def stream_output(stream: Any, stream_type: str) -> list[T]:
        captured: list[T] = []
        for line in iter(stream.readline, ""):
            if line:
                processed = middleware.process(line.rstrip("\n"), stream_type)
                if processed is not None:
                    captured.append(processed)
        stream.close()
        return captured

    stdout_lines: list[T] = []
    stderr_lines: list[T] = []

    stdout_thread = Thread(
        target=lambda: stdout_lines.extend(stream_output(process.stdout, "stdout")),
        daemon=True,
    )
    stderr_thread = Thread(
        target=lambda: stderr_lines.extend(stream_output(process.stderr, "stderr")),
        daemon=True,
    )
    stdout_thread.start()
    stderr_thread.start()

    return_code = process.wait()

    stdout_thread.join()
    stderr_thread.join()

    return return_code, stdout_lines, stderr_lines


def format_diagnostic(stdout: list[str], stderr: list[str]) -> str:
    """Return the toolchain diagnostic text: stderr lines, then stdout lines."""
    return "\n".join(str(line) for line in [*stderr, *stdout])
