"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer

from kiln.cli.helpers.output import print_diagnostic, print_error_message
from kiln.core.errors import (
    BuildError,
    ConfigurationError,
    KilnError,
    MetadataError,
    TaskError,
    VersionResolutionError,
)
from kiln.core.structlog_logger import get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)

_EVENTS: list[tuple[type[KilnError], str]] = [
    (ConfigurationError, "configuration_error"),
    (BuildError, "build_error"),
    (TaskError, "task_error"),
    (VersionResolutionError, "version_resolution_error"),
    (MetadataError, "metadata_error"),
]


def _report(error: KilnError) -> None:
    event = next(
        (name for kind, name in _EVENTS if isinstance(error, kind)), "kiln_error"
    )
    logger.error(event, error=error.message, **_loggable(error.context))
    print_error_message(str(error))
    diagnostic = error.context.get("diagnostic")
    if diagnostic:
        print_diagnostic(diagnostic)


def _loggable(context: dict[str, Any]) -> dict[str, Any]:
    # "event" is reserved by structlog
    return {k: v for k, v in context.items() if k not in ("event", "diagnostic")}


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle Kiln errors in CLI commands.

    Each error kind is logged as its own event, printed with its context and
    the underlying diagnostic, and turned into exit status 1.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except KilnError as e:
            _report(e)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except FileNotFoundError as e:
            logger.error("file_not_found", error=str(e))
            print_error_message(str(e))
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if logging.getLogger().isEnabledFor(logging.DEBUG) or any(
        arg in sys.argv for arg in ["-vv", "--debug"]
    ):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
