"""
CLI: ``lifeops db`` -- database management commands.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def init(
    database: str | None = typer.Option(None, "--database", "-d", help="Database path"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without changes"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Initialise database schema (create tables)."""
    from lifeops.ops.database import initialize_database

    ctx, _conn = make_context(database, dry_run=dry_run)
    output_result(initialize_database(ctx), as_json=json_out, title="Database Init")
