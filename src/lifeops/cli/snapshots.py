"""
CLI: ``lifeops snapshots`` -- record metric snapshots by hand.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


def _parse_metric(raw: str) -> tuple[str, float]:
    name, sep, value = raw.partition("=")
    if not sep or not name.strip():
        raise typer.BadParameter(f"expected NAME=VALUE, got '{raw}'")
    try:
        number = float(value)
    except ValueError as exc:
        raise typer.BadParameter(f"'{name}' needs a numeric value, got '{value}'") from exc
    return name.strip(), int(number) if number.is_integer() and "." not in value else number


@app.command()
def record(
    domain: str = typer.Argument(..., help="Domain, e.g. work-ops"),
    metric: list[str] = typer.Option(..., "--metric", "-m", help="NAME=VALUE (repeatable)"),
    source: str = typer.Option("manual", "--source"),
    captured_at: str | None = typer.Option(None, "--captured-at", help="ISO-8601 time"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Record one snapshot: ``lifeops snapshots record work-ops -m catering_lead_time_hours=40``."""
    from lifeops.ops.requests import RecordSnapshotRequest
    from lifeops.ops.snapshots import record_snapshot

    metrics = dict(_parse_metric(m) for m in metric)
    ctx, _conn = make_context(database, dry_run=dry_run)
    request = RecordSnapshotRequest(
        domain=domain, metrics=metrics, source=source, captured_at=captured_at,
    )
    output_result(record_snapshot(ctx, request), as_json=json_out, title="Snapshot")
