"""
Database operations.

Thin wrapper around :func:`lifeops.core.schema.create_tables`.
"""

from __future__ import annotations

from lifeops.core.logging import get_logger
from lifeops.core.schema import TABLES, create_tables
from lifeops.ops.context import OperationContext
from lifeops.ops.responses import DatabaseInitResult
from lifeops.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def initialize_database(ctx: OperationContext) -> OperationResult[DatabaseInitResult]:
    """Create all lifeops tables and indexes (idempotent)."""
    timer = start_timer()

    if ctx.dry_run:
        return OperationResult.ok(
            DatabaseInitResult(tables_created=list(TABLES.values()), dry_run=True),
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        tables = create_tables(ctx.conn)
    except Exception as exc:
        logger.exception("op_failed", op="initialize_database", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to create tables: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )
    logger.info("database_initialized", tables=len(tables))
    return OperationResult.ok(
        DatabaseInitResult(tables_created=tables),
        elapsed_ms=timer.elapsed_ms,
    )
