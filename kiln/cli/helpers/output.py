"""Helper functions for CLI output formatting with Rich integration."""

from rich.console import Console
from rich.table import Table

from kiln.build.collector import canonical_artifact_name
from kiln.matrix.models import BuildJob
from kiln.models.results import PhaseResult


console = Console()
error_console = Console(stderr=True)


def print_success_message(message: str) -> None:
    """Print a success message with a checkmark."""
    console.print(f"[green]✓[/green] {message}")


def print_error_message(message: str) -> None:
    """Print an error message to stderr with an X symbol."""
    error_console.print(f"[red]✗[/red] {message}", highlight=False)


def print_list_item(item: str, indent: int = 1) -> None:
    """Print a list item with bullet and indentation."""
    console.print(f"{' ' * (indent * 2)}• {item}", highlight=False)


def print_diagnostic(diagnostic: str) -> None:
    """Print toolchain output verbatim to stderr."""
    error_console.out(diagnostic, highlight=False)


def print_phase_result(result: PhaseResult) -> None:
    """Print a summary of a phase run."""
    for step in result.steps:
        if step.success:
            print_list_item(f"{step.name} ({step.duration_seconds:.1f}s)")
            for output in step.outputs:
                print_list_item(output, indent=2)

    if result.success:
        print_success_message(
            f"Phase '{result.phase}' completed: {len(result.steps)} step(s)"
        )


def print_matrix(jobs: list[BuildJob], title: str) -> None:
    """Print build jobs as a table."""
    table = Table(title=title)
    table.add_column("Target")
    table.add_column("Variant")
    table.add_column("Features")
    table.add_column("Artifact")
    for job in jobs:
        table.add_row(
            job.target.id,
            job.variant.id,
            ", ".join(job.features) or "-",
            canonical_artifact_name(job.target, job.variant),
        )
    console.print(table)
