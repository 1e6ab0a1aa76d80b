"""
CLI: ``lifeops pipeline`` -- trigger and inspect the alerting pipeline.

Point cron (or any scheduler) at ``lifeops pipeline run``; every call is an
independent invocation.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def generate(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Evaluate without writing alerts"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Evaluate thresholds and write alerts (no dispatch)."""
    from lifeops.ops.pipeline import generate_alerts

    ctx, _conn = make_context(database, dry_run=dry_run)
    output_result(generate_alerts(ctx), as_json=json_out, title="Alert Generation")


@app.command()
def run(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Evaluate and show tiers only"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Run generate → dispatch → record once."""
    from lifeops.ops.pipeline import run_pipeline

    ctx, _conn = make_context(database, dry_run=dry_run)
    ctx.caller = "scheduler" if not dry_run else "cli"
    output_result(run_pipeline(ctx), as_json=json_out, title="Pipeline Run")


@app.command()
def status(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show run health, last run, next due time and pending approvals."""
    from lifeops.ops.pipeline import get_pipeline_status

    ctx, _conn = make_context(database)
    output_result(get_pipeline_status(ctx), as_json=json_out, title="Pipeline Status")
