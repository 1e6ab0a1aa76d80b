"""
FastAPI dependency injection -- settings, connections and op contexts.

Usage in routers::

    from lifeops.api.deps import OpContext

    @router.get("/things")
    def list_things(ctx: OpContext):
        ...

Each request opens its own connection and closes it afterwards; nothing
is shared between requests.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Query, Request

from lifeops.core.settings import LifeOpsSettings
from lifeops.core.settings import get_settings as _load_settings
from lifeops.ops.context import OperationContext
from lifeops.ops.sqlite_conn import SqliteConnection, open_connection


def get_settings() -> LifeOpsSettings:
    """Process settings; overridden per app by :func:`create_app`."""
    return _load_settings()


def get_connection(
    settings: Annotated[LifeOpsSettings, Depends(get_settings)],
) -> Generator[SqliteConnection, None, None]:
    """Yield a database connection for the request lifespan."""
    conn = open_connection(settings.database_path)
    try:
        yield conn
    finally:
        conn.close()


def get_operation_context(
    request: Request,
    conn: Annotated[SqliteConnection, Depends(get_connection)],
    settings: Annotated[LifeOpsSettings, Depends(get_settings)],
    dry_run: bool = Query(False, description="Evaluate without writing"),
) -> OperationContext:
    """Build an :class:`OperationContext` from the current request."""
    request_id = getattr(request.state, "request_id", str(uuid.uuid4()))
    return OperationContext(
        conn=conn,
        request_id=request_id,
        caller="api",
        dry_run=dry_run,
        job_name=settings.job_name,
        pipeline_interval=settings.pipeline_interval,
        health_window=settings.health_window,
    )


Settings = Annotated[LifeOpsSettings, Depends(get_settings)]
OpContext = Annotated[OperationContext, Depends(get_operation_context)]
