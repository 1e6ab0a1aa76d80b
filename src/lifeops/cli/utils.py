"""
CLI utility helpers -- output formatting and context management.
"""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from lifeops.core.errors import ConfigError
from lifeops.core.settings import get_settings
from lifeops.ops.context import OperationContext
from lifeops.ops.result import OperationResult, PagedResult
from lifeops.ops.sqlite_conn import SqliteConnection, open_connection

console = Console()
err_console = Console(stderr=True)


# ── Context helper ───────────────────────────────────────────────────────


def get_connection(database: str | None = None) -> SqliteConnection:
    """Open the database.  Defaults to ``LIFEOPS_DATABASE_PATH``."""
    path = database or str(get_settings().database_path)
    try:
        return open_connection(path)
    except ConfigError as exc:
        err_console.print(f"[bold red]Error[/bold red] (CONFIG): {exc.message}")
        raise typer.Exit(code=1) from exc


def make_context(
    database: str | None = None,
    *,
    dry_run: bool = False,
) -> tuple[OperationContext, SqliteConnection]:
    """Create an ``OperationContext`` + connection pair for CLI commands."""
    settings = get_settings()
    conn = get_connection(database)
    ctx = OperationContext(
        conn=conn,
        caller="cli",
        dry_run=dry_run,
        job_name=settings.job_name,
        pipeline_interval=settings.pipeline_interval,
        health_window=settings.health_window,
    )
    return ctx, conn


# ── Output helpers ───────────────────────────────────────────────────────


def _to_dict(obj: Any) -> dict[str, Any]:
    """Convert dataclass / pydantic model / dict to plain dict."""
    if hasattr(obj, "model_dump"):
        return obj.model_dump()
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, dict):
        return obj
    return {"value": str(obj)}


def _fail(result: OperationResult) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    code = err.code if err else "ERROR"
    _print_warnings(result.warnings)
    err_console.print(f"[bold red]Error[/bold red] ({code}): {msg}")
    raise typer.Exit(code=1)


def _print_warnings(warnings: list[str]) -> None:
    for warning in warnings:
        err_console.print(f"[yellow]warning:[/yellow] {warning}")


def output_result(
    result: OperationResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render an ``OperationResult`` to the terminal; exit 1 on failure."""
    if not result.success:
        _fail(result)

    data = result.data

    if as_json:
        console.print_json(json.dumps(result.to_dict(), default=str))
        return

    _print_warnings(result.warnings)
    if isinstance(data, list):
        if not data:
            console.print("[dim]No items.[/dim]")
            return
        _print_table(data, title=title)
    else:
        _print_dict(_to_dict(data), title=title)


def output_paged(
    result: PagedResult,
    *,
    as_json: bool = False,
    title: str = "",
) -> None:
    """Render a ``PagedResult`` to the terminal with pagination info."""
    if not result.success:
        _fail(result)

    items = result.data or []

    if as_json:
        payload = {
            "items": [_to_dict(d) for d in items],
            "total": result.total,
            "limit": result.limit,
            "offset": result.offset,
            "has_more": result.has_more,
        }
        console.print_json(json.dumps(payload, default=str))
        return

    if not items:
        console.print("[dim]No items.[/dim]")
        return

    _print_table(items, title=title)
    console.print(
        f"\n[dim]Showing {len(items)} of {result.total}"
        f" (offset {result.offset})[/dim]"
    )


# ── Private helpers ──────────────────────────────────────────────────────


def _print_table(items: list, *, title: str = "", exclude: tuple[str, ...] = ("metadata",)) -> None:
    """Render a list of dataclasses/dicts as a Rich table."""
    first = {k: v for k, v in _to_dict(items[0]).items() if k not in exclude}
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in first:
        table.add_column(col, overflow="fold")
    for item in items:
        d = _to_dict(item)
        table.add_row(*(str(d.get(col)) for col in first))
    console.print(table)


def _print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        if isinstance(v, list) and v and isinstance(v[0], dict):
            console.print(f"  [cyan]{k}[/cyan]: {len(v)}")
            for entry in v:
                console.print(f"    - {entry}")
            continue
        console.print(f"  [cyan]{k}[/cyan]: {v}")
