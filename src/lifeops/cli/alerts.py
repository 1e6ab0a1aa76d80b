"""
CLI: ``lifeops alerts`` -- browse the alert log.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_paged

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_cmd(
    domain: str | None = typer.Option(None, "--domain"),
    severity: str | None = typer.Option(None, "--severity"),
    source: str | None = typer.Option(None, "--source", help="threshold_eval, policy_dispatch, job_monitor"),
    limit: int = typer.Option(50, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List alert events, newest first."""
    from lifeops.ops.alerts import list_alerts
    from lifeops.ops.requests import ListAlertsRequest

    ctx, _conn = make_context(database)
    request = ListAlertsRequest(
        domain=domain, severity=severity, source=source, limit=limit, offset=offset,
    )
    output_paged(list_alerts(ctx, request), as_json=json_out, title="Alerts")
