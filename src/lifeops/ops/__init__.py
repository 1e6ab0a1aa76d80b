"""
Operations layer -- transport-agnostic entry points for lifeops.

- All functions accept ``OperationContext`` as first argument
- All functions return ``OperationResult[T]`` (never raise)
- The CLI and HTTP API only translate arguments and render results

Usage::

    from lifeops.ops import OperationContext
    from lifeops.ops.pipeline import run_pipeline
    from lifeops.ops.sqlite_conn import open_connection

    ctx = OperationContext(conn=open_connection("lifeops.db"), caller="scheduler")
    result = run_pipeline(ctx)
    assert result.success, result.error
"""

from lifeops.ops.context import OperationContext
from lifeops.ops.result import OperationError, OperationResult, PagedResult
from lifeops.ops.sqlite_conn import SqliteConnection, open_connection

__all__ = [
    "OperationContext",
    "OperationError",
    "OperationResult",
    "PagedResult",
    "SqliteConnection",
    "open_connection",
]
