"""Main CLI application for Kiln."""

import logging
import sys
from importlib.metadata import PackageNotFoundError, distribution
from pathlib import Path
from typing import Annotated

import typer

from kiln.cli.decorators.error_handling import print_stack_trace_if_verbose
from kiln.config.loader import find_config_file, load_project_config
from kiln.config.settings import KilnSettings
from kiln.core.errors import ConfigurationError
from kiln.core.logging import setup_logging
from kiln.orchestration.context import RunContext


__all__ = ["AppContext", "app", "main", "__version__"]

try:
    __version__ = distribution("kiln").version
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)


class AppContext:
    """Application context for storing shared state."""

    def __init__(
        self,
        verbose: int = 0,
        log_file: str | None = None,
        config_file: Path | None = None,
        settings: KilnSettings | None = None,
    ) -> None:
        self.verbose = verbose
        self.log_file = log_file
        self.settings = settings or KilnSettings()
        self.config_file = config_file or self.settings.config_file
        self._run_context: RunContext | None = None

    def resolve_config_path(self) -> Path:
        if self.config_file is not None:
            return Path(self.config_file).expanduser().resolve()
        found = find_config_file()
        if found is None:
            raise ConfigurationError(
                "No kiln.yaml found in the current directory or its parents"
            )
        return found

    def run_context(self) -> RunContext:
        """Load the project configuration once per invocation."""
        if self._run_context is None:
            config_path = self.resolve_config_path()
            self._run_context = RunContext(
                project_root=config_path.parent,
                config=load_project_config(config_path),
                settings=self.settings,
            )
        return self._run_context


app = typer.Typer(
    name="kiln",
    help=f"""Kiln firmware release builder v{__version__}

Builds every hardware target in every release variant and assembles a
canonically named release bundle:

  kiln check       run each subsystem's checks
  kiln lint        formatting and lint checks
  kiln doc         build documentation
  kiln binaries    build the target x variant matrix into binaries/
  kiln metadata    license report, command docs and manifest""",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _version_callback(value: bool) -> None:
    if value:
        print(f"Kiln v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v", "--verbose", count=True, help="Increase verbosity (-v=INFO, -vv=DEBUG)"
        ),
    ] = 0,
    debug: Annotated[
        bool, typer.Option("--debug", help="Enable debug logging (equivalent to -vv)")
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Write JSON logs to file")
    ] = None,
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Render console logs as JSON")
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Path to kiln.yaml", dir_okay=False),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit",
            callback=_version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Kiln firmware release builder."""
    settings = KilnSettings()
    app_context = AppContext(
        verbose=verbose, log_file=log_file, config_file=config_file, settings=settings
    )
    ctx.obj = app_context

    log_level = settings.log_level
    if debug or verbose >= 2:
        log_level = "DEBUG"
    elif verbose == 1:
        log_level = "INFO"

    setup_logging(
        json_logs=json_logs, log_level_name=log_level, log_file=log_file
    )


def main() -> int:
    """Main CLI entry point.

    Commands are registered when the ``kiln.cli`` package is imported.
    """
    try:
        app()
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 0
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        print_stack_trace_if_verbose()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
