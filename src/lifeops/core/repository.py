"""Base repository with dialect-aware database access.

Provides :class:`BaseRepository`, which pairs a
:class:`~lifeops.core.protocols.Connection` with a
:class:`~lifeops.core.dialect.Dialect` so that domain repositories can
write portable SQL without referencing a driver.

Architecture::

    ┌────────────────────────────────────────────────────────────────────┐
    │                       BaseRepository                               │
    │                                                                    │
    │   conn: Connection        ← protocol from lifeops.core.protocols   │
    │   dialect: Dialect        ← from lifeops.core.dialect              │
    │                                                                    │
    │   execute(sql, params)     → cursor                                │
    │   query(sql, params)       → list[dict]                            │
    │   query_one(sql, params)   → dict | None                           │
    │   insert(table, data)      → cursor                                │
    │   upsert(table, data, key) → cursor                                │
    └────────────────────────────────────────────────────────────────────┘

Tags:
    repository, database, abstraction, portability
"""

from __future__ import annotations

from typing import Any

from lifeops.core.dialect import Dialect, SQLiteDialect
from lifeops.core.protocols import Connection


class BaseRepository:
    """Dialect-aware base class for data-access repositories.

    Parameters:
        conn: Any object satisfying the :class:`Connection` protocol.
        dialect: SQL dialect to use.  Defaults to :class:`SQLiteDialect`.
    """

    def __init__(self, conn: Connection, dialect: Dialect | None = None) -> None:
        self.conn = conn
        self.dialect: Dialect = dialect or SQLiteDialect()

    def ph(self, count: int) -> str:
        """Shortcut for ``self.dialect.placeholders(count)``."""
        return self.dialect.placeholders(count)

    # -- Query helpers -----------------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        """Execute a statement and return the raw cursor/result."""
        return self.conn.execute(sql, params)

    def query(self, sql: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Execute a SELECT and return rows as dicts."""
        cursor = self.conn.execute(sql, params)
        rows = cursor.fetchall()
        if not rows:
            return []

        # sqlite3.Row and DictCursor rows convert directly
        try:
            return [dict(row) for row in rows]
        except (TypeError, ValueError):
            pass

        if hasattr(cursor, "description") and cursor.description:
            columns = [desc[0] for desc in cursor.description]
            return [dict(zip(columns, row, strict=False)) for row in rows]

        return [{i: v for i, v in enumerate(row)} for row in rows]

    def query_one(self, sql: str, params: tuple = ()) -> dict[str, Any] | None:
        """Execute a SELECT and return the first row as a dict (or None)."""
        results = self.query(sql, params)
        return results[0] if results else None

    # -- Write helpers -----------------------------------------------------

    def insert(self, table: str, data: dict[str, Any]) -> Any:
        """Insert a single row from a dict."""
        columns = list(data.keys())
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({self.ph(len(columns))})"
        return self.conn.execute(sql, tuple(data.values()))

    def upsert(self, table: str, data: dict[str, Any], key_columns: list[str]) -> Any:
        """Insert a row or update the non-key columns of the existing one."""
        sql = self.dialect.upsert(table, list(data.keys()), key_columns)
        return self.conn.execute(sql, tuple(data.values()))


__all__ = ["BaseRepository"]
