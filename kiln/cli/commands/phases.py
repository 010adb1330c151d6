"""Phase commands: check, doc, lint, binaries and single builds."""

from pathlib import Path
from typing import Annotated

import typer

from kiln.cli.app import AppContext
from kiln.cli.decorators import handle_errors
from kiln.cli.helpers import print_phase_result
from kiln.core.errors import ConfigurationError
from kiln.matrix.expander import MatrixExpander
from kiln.models.results import PhaseResult
from kiln.orchestration.orchestrator import Orchestrator
from kiln.orchestration.phases import BinariesOptions, PhasePlanner
from kiln.orchestration.tasks import PhasePlan


def execute_plan(app_context: AppContext, plan: PhasePlan) -> PhaseResult:
    """Run a plan, print the summary and raise the failing step's error."""
    result = Orchestrator(app_context.run_context()).run(plan)
    print_phase_result(result)
    result.raise_for_failure()
    return result


def run_phase(
    ctx: typer.Context, phase: str, options: BinariesOptions | None = None
) -> PhaseResult:
    app_context: AppContext = ctx.obj
    planner = PhasePlanner(app_context.run_context())
    return execute_plan(app_context, planner.plan(phase, options))


@handle_errors
def check(ctx: typer.Context) -> None:
    """Run every subsystem's check routine."""
    run_phase(ctx, "check")


@handle_errors
def doc(ctx: typer.Context) -> None:
    """Build documentation for the documented subsystems."""
    run_phase(ctx, "doc")


@handle_errors
def lint(ctx: typer.Context) -> None:
    """Run workspace formatting checks and every subsystem's lint routine."""
    run_phase(ctx, "lint")


@handle_errors
def binaries(
    ctx: typer.Context,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for collected artifacts"),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option(
            "--jobs", "-j", min=1, help="Build targets in parallel with N workers"
        ),
    ] = None,
    no_metadata: Annotated[
        bool,
        typer.Option("--no-metadata", help="Skip license, command and manifest files"),
    ] = False,
) -> None:
    """Build the full target x variant matrix and collect every artifact."""
    app_context: AppContext = ctx.obj
    options = BinariesOptions(
        output_dir=output_dir,
        jobs=jobs or app_context.settings.jobs,
        metadata=False if no_metadata else None,
    )
    run_phase(ctx, "binaries", options)


@handle_errors
def build(
    ctx: typer.Context,
    target: Annotated[str, typer.Argument(help="Target id, e.g. nk3xn")],
    variant: Annotated[str, typer.Argument(help="Variant id, e.g. release")],
    feature: Annotated[
        list[str] | None,
        typer.Option("--feature", "-F", help="Extra feature for this build"),
    ] = None,
    output_dir: Annotated[
        Path | None,
        typer.Option("--output-dir", "-o", help="Directory for the collected artifact"),
    ] = None,
) -> None:
    """Build and collect a single target/variant pair."""
    app_context: AppContext = ctx.obj
    run_context = app_context.run_context()
    jobs = MatrixExpander(run_context.config).expand_selection([target], [variant])
    if not jobs:
        raise ConfigurationError(
            f"Target '{target}' is not built in variant '{variant}'",
            {"target": target, "variant": variant},
        )
    job = jobs[0]
    if feature:
        job.variant = job.variant.with_extra_features(feature)

    planner = PhasePlanner(run_context)
    execute_plan(app_context, planner.plan_single_build(job, output_dir))


def register_commands(app: typer.Typer) -> None:
    """Register phase commands with the main app.

    Args:
        app: The main Typer app
    """
    app.command(name="check")(check)
    app.command(name="doc")(doc)
    app.command(name="lint")(lint)
    app.command(name="binaries")(binaries)
    app.command(name="build")(build)
