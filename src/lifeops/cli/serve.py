"""
CLI: ``lifeops serve`` -- start the HTTP API.
"""

from __future__ import annotations

import typer
import uvicorn

from lifeops.cli.utils import console
from lifeops.core.settings import get_settings

app = typer.Typer(no_args_is_help=True)


@app.command("start")
def start(
    host: str | None = typer.Option(None, "--host", "-h", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on changes"),
) -> None:
    """Start the lifeops REST API server."""
    settings = get_settings()
    host = host or settings.host
    port = port or settings.port
    console.print(f"[bold green]Starting lifeops API[/bold green] on {host}:{port}")
    uvicorn.run(
        "lifeops.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )
