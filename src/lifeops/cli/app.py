"""
Root Typer application for the lifeops CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from lifeops.core.logging import configure_logging
from lifeops.core.settings import get_settings

app = Typer(
    name="lifeops",
    help="lifeops -- threshold alerts with policy-gated actions.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from lifeops import __version__

        typer.echo(f"lifeops {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """lifeops CLI -- run the pipeline, review approvals, manage rules."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.json_logs,
    )


# ── Sub-command registration ─────────────────────────────────────────────

from lifeops.cli.alerts import app as alerts_app  # noqa: E402
from lifeops.cli.approvals import app as approvals_app  # noqa: E402
from lifeops.cli.approvals import grants_app  # noqa: E402
from lifeops.cli.db import app as db_app  # noqa: E402
from lifeops.cli.pipeline import app as pipeline_app  # noqa: E402
from lifeops.cli.rules import app as rules_app  # noqa: E402
from lifeops.cli.serve import app as serve_app  # noqa: E402
from lifeops.cli.snapshots import app as snapshots_app  # noqa: E402

app.add_typer(pipeline_app, name="pipeline", help="Generate, run and inspect the pipeline.")
app.add_typer(approvals_app, name="approvals", help="Review the approval inbox.")
app.add_typer(grants_app, name="grants", help="List and revoke reusable grants.")
app.add_typer(rules_app, name="rules", help="Threshold rule management.")
app.add_typer(snapshots_app, name="snapshots", help="Record metric snapshots.")
app.add_typer(alerts_app, name="alerts", help="Browse alert events.")
app.add_typer(db_app, name="db", help="Database operations.")
app.add_typer(serve_app, name="serve", help="Start the API server.")
