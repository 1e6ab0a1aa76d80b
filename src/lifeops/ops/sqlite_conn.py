"""SQLite connection adapter.

Wraps a raw :class:`sqlite3.Connection` to satisfy the
:class:`~lifeops.core.protocols.Connection` protocol.

A bare ``sqlite3.Connection`` exposes ``execute()`` (returns a cursor)
but not ``fetchone()`` / ``fetchall()`` at the connection level.  This
adapter bridges the gap so repositories can stay driver-agnostic.

Usage::

    from lifeops.ops.sqlite_conn import open_connection

    conn = open_connection("~/.lifeops/lifeops.db")
    conn.execute("SELECT COUNT(*) FROM job_runs")
    row = conn.fetchone()
    conn.close()
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Any

from lifeops.core.errors import ConfigError


class SqliteConnection:
    """Adapter: ``sqlite3.Connection`` → ``Connection`` protocol.

    Maintains a single cursor so that ``execute`` / ``fetchone`` /
    ``fetchall`` operate on the same result set.
    """

    def __init__(self, path: str = ":memory:", *, row_factory: Any = sqlite3.Row) -> None:
        self._conn = sqlite3.connect(path, check_same_thread=False)
        self._conn.row_factory = row_factory
        self._cursor = self._conn.cursor()

    # -- Connection protocol -----------------------------------------------

    def execute(self, sql: str, params: tuple = ()) -> Any:
        self._cursor.execute(sql, params)
        return self._cursor

    def executemany(self, sql: str, params: list[tuple]) -> Any:
        self._cursor.executemany(sql, params)
        return self._cursor

    def fetchone(self) -> Any:
        return self._cursor.fetchone()

    def fetchall(self) -> list:
        return self._cursor.fetchall()

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()

    def __repr__(self) -> str:
        return f"SqliteConnection({self._conn!r})"


def open_connection(path: str | Path) -> SqliteConnection:
    """Open *path*, creating its parent directory when needed.

    Raises:
        ConfigError: The database location cannot be created or opened.
    """
    target = str(path)
    if target != ":memory:":
        resolved = Path(target).expanduser()
        try:
            resolved.parent.mkdir(parents=True, exist_ok=True)
            return SqliteConnection(str(resolved))
        except (OSError, sqlite3.Error) as exc:
            raise ConfigError(
                f"Cannot open database at '{resolved}': {exc}",
                context={"database_path": str(resolved)},
                cause=exc,
            ) from exc
    return SqliteConnection(target)
