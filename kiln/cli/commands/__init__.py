"""CLI command modules."""

import typer

from kiln.cli.commands.matrix import register_commands as register_matrix_commands
from kiln.cli.commands.metadata import (
    register_commands as register_metadata_commands,
)
from kiln.cli.commands.phases import register_commands as register_phase_commands


def register_all_commands(app: typer.Typer) -> None:
    """Register all CLI commands with the main app.

    Args:
        app: The main Typer app
    """
    register_phase_commands(app)
    register_matrix_commands(app)
    register_metadata_commands(app)
