"""
SQL dialect helpers.

Repositories build SQL through a :class:`Dialect` so placeholder style and
upsert syntax live in one place.  Only SQLite ships today; a PostgreSQL
dialect would implement the same three methods.

Examples:
    >>> d = SQLiteDialect()
    >>> d.placeholders(3)
    '?, ?, ?'
    >>> d.upsert("t", ["k", "v"], ["k"])
    'INSERT INTO t (k, v) VALUES (?, ?) ON CONFLICT (k) DO UPDATE SET v = excluded.v'
"""

from __future__ import annotations

from typing import Protocol


class Dialect(Protocol):
    @property
    def name(self) -> str: ...

    def placeholders(self, count: int) -> str: ...

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str: ...


class SQLiteDialect:
    """SQLite dialect - ``?`` placeholders, ``ON CONFLICT ... DO UPDATE`` upserts."""

    @property
    def name(self) -> str:
        return "sqlite"

    def placeholders(self, count: int) -> str:
        return ", ".join("?" for _ in range(count))

    def upsert(self, table: str, columns: list[str], key_columns: list[str]) -> str:
        cols = ", ".join(columns)
        ph = self.placeholders(len(columns))
        keys = ", ".join(key_columns)
        update_cols = [c for c in columns if c not in key_columns]
        updates = ", ".join(f"{c} = excluded.{c}" for c in update_cols)
        return (
            f"INSERT INTO {table} ({cols}) VALUES ({ph}) "
            f"ON CONFLICT ({keys}) DO UPDATE SET {updates}"
        )


__all__ = ["Dialect", "SQLiteDialect"]
