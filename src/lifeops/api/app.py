"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and the
lifespan hook (which creates the schema on startup) into one ``FastAPI``
instance.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lifeops import __version__
from lifeops.api.deps import get_settings
from lifeops.api.errors import unhandled_exception_handler
from lifeops.api.middleware import RequestIDMiddleware
from lifeops.core.logging import get_logger
from lifeops.core.schema import create_tables
from lifeops.core.settings import LifeOpsSettings
from lifeops.ops.sqlite_conn import open_connection

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables on startup; a failure is logged and requests will surface it."""
    settings: LifeOpsSettings = app.state.settings
    logger.info("api_starting", version=app.version, database=str(settings.database_path))
    conn = None
    try:
        conn = open_connection(settings.database_path)
        create_tables(conn)
    except Exception as exc:
        logger.warning("database_auto_init_failed", error=str(exc))
    finally:
        if conn is not None:
            conn.close()
    yield
    logger.info("api_stopping")


def create_app(*, settings: LifeOpsSettings | None = None) -> FastAPI:
    """Build and return a configured FastAPI application.

    Parameters
    ----------
    settings : LifeOpsSettings | None
        Override settings (useful for testing).  When ``None`` the cached
        process settings are used.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="lifeops",
        version=__version__,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )
    app.state.settings = settings
    app.dependency_overrides[get_settings] = lambda: settings

    app.add_middleware(RequestIDMiddleware)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    from lifeops.api.routers import approvals, pipeline

    prefix = settings.api_prefix
    app.include_router(pipeline.router, prefix=prefix, tags=["pipeline"])
    app.include_router(approvals.router, prefix=prefix, tags=["approvals"])
    app.include_router(approvals.grants_router, prefix=prefix, tags=["grants"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": __version__}

    return app
