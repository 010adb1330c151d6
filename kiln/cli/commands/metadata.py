"""Metadata commands, each runnable on its own."""

from typing import Annotated

import typer

from kiln.adapters.git_adapter import create_version_provider
from kiln.cli.app import AppContext
from kiln.cli.decorators import handle_errors
from kiln.cli.helpers import print_success_message
from kiln.metadata.service import MetadataService


metadata_app = typer.Typer(
    name="metadata",
    help="Generate the license report, command documentation or manifest.",
    no_args_is_help=True,
)


@metadata_app.command(name="license")
@handle_errors
def license_report(ctx: typer.Context) -> None:
    """Write the dependency license report."""
    app_context: AppContext = ctx.obj
    path = MetadataService().generate_license_report(app_context.run_context())
    print_success_message(f"License report written to {path}")


@metadata_app.command(name="commands")
@handle_errors
def command_doc(ctx: typer.Context) -> None:
    """Write the firmware command documentation."""
    app_context: AppContext = ctx.obj
    path = MetadataService().generate_command_doc(app_context.run_context())
    print_success_message(f"Command documentation written to {path}")


@metadata_app.command(name="manifest")
@handle_errors
def manifest(
    ctx: typer.Context,
    version: Annotated[
        str | None,
        typer.Option("--version", help="Use this version instead of git describe"),
    ] = None,
) -> None:
    """Write the version-stamped manifest."""
    app_context: AppContext = ctx.obj
    provider = create_version_provider(
        version, git_executable=app_context.settings.git_executable
    )
    path = MetadataService(version_provider=provider).stamp_manifest(
        app_context.run_context()
    )
    print_success_message(f"Manifest written to {path}")


def register_commands(app: typer.Typer) -> None:
    """Register metadata commands with the main app."""
    app.add_typer(metadata_app, name="metadata")
