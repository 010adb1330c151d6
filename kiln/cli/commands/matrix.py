"""Show the expanded build matrix."""

from typing import Annotated

import typer

from kiln.cli.app import AppContext
from kiln.cli.decorators import handle_errors
from kiln.cli.helpers import print_matrix
from kiln.matrix.expander import MatrixExpander


@handle_errors
def matrix(
    ctx: typer.Context,
    phase: Annotated[
        str | None,
        typer.Argument(help="Phase to expand; every configured pair when omitted"),
    ] = None,
) -> None:
    """List build jobs with their composed features and artifact names."""
    app_context: AppContext = ctx.obj
    expander = MatrixExpander(app_context.run_context().config)
    if phase is None:
        jobs = expander.expand_selection()
        title = "All targets and variants"
    else:
        jobs = expander.expand(phase)
        title = f"Phase '{phase}'"
    print_matrix(jobs, title)


def register_commands(app: typer.Typer) -> None:
    """Register the matrix command with the main app."""
    app.command(name="matrix")(matrix)
