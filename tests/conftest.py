"""
Shared pytest fixtures for lifeops tests.

Provides:
- ``conn``: in-memory SQLite connection with every lifeops table created
- ``ctx`` / ``dry_ctx``: ``OperationContext`` wired to that connection
- ``add_rule`` / ``add_snapshot``: seed helpers going through the ops layer
- ``make_candidate``: factory for ``ActionCandidate`` values
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest

from lifeops.core.enums import Operator, Severity
from lifeops.core.models import ActionCandidate
from lifeops.core.schema import create_tables
from lifeops.core.settings import get_settings
from lifeops.ops.context import OperationContext
from lifeops.ops.requests import RecordSnapshotRequest, UpsertRuleRequest
from lifeops.ops.rules import upsert_rule
from lifeops.ops.snapshots import record_snapshot
from lifeops.ops.sqlite_conn import SqliteConnection


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep tests independent of the developer's environment."""
    for key in ("LIFEOPS_DATABASE_PATH", "LIFEOPS_JOB_NAME", "LIFEOPS_JSON_LOGS"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("LIFEOPS_LOG_LEVEL", "WARNING")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def conn() -> Generator[SqliteConnection, None, None]:
    """In-memory SQLite connection with the lifeops schema applied."""
    c = SqliteConnection(":memory:")
    create_tables(c)
    yield c
    c.close()


@pytest.fixture()
def ctx(conn: SqliteConnection) -> OperationContext:
    return OperationContext(conn=conn, caller="test")


@pytest.fixture()
def dry_ctx(conn: SqliteConnection) -> OperationContext:
    return OperationContext(conn=conn, caller="test", dry_run=True)


@pytest.fixture()
def add_rule(ctx: OperationContext) -> Callable[..., str]:
    """Insert a threshold rule and return its id."""

    def _add(
        domain: str = "work-ops",
        metric: str = "catering_lead_time_hours",
        operator: str = "<=",
        threshold: float = 48,
        severity: str = "warning",
        enabled: bool = True,
    ) -> str:
        result = upsert_rule(ctx, UpsertRuleRequest(
            domain=domain,
            metric=metric,
            operator=operator,
            threshold=threshold,
            severity=severity,
            enabled=enabled,
        ))
        assert result.success, result.error
        return result.data.id

    return _add


@pytest.fixture()
def add_snapshot(ctx: OperationContext) -> Callable[..., str]:
    """Record a metric snapshot and return its id."""

    def _add(domain: str = "work-ops", source: str = "test", **metrics: Any) -> str:
        result = record_snapshot(ctx, RecordSnapshotRequest(
            domain=domain, metrics=metrics, source=source,
        ))
        assert result.success, result.error
        return result.data.id

    return _add


@pytest.fixture()
def make_candidate() -> Callable[..., ActionCandidate]:
    def _make(
        domain: str = "work-ops",
        metric: str = "catering_lead_time_hours",
        value: float = 40,
        threshold: float = 48,
        operator: Operator = Operator.LE,
        severity: Severity = Severity.WARNING,
        alert_id: str | None = "evt_test_0",
    ) -> ActionCandidate:
        return ActionCandidate(
            domain=domain,
            metric=metric,
            value=value,
            threshold=threshold,
            operator=operator,
            severity=severity,
            source="threshold_eval",
            alert_id=alert_id,
        )

    return _make


def count_rows(conn: SqliteConnection, table: str, where: str = "1=1", params: tuple = ()) -> int:
    conn.execute(f"SELECT COUNT(*) FROM {table} WHERE {where}", params)
    return conn.fetchone()[0]


@pytest.fixture()
def rows() -> Callable[..., int]:
    """``rows(conn, table, where, params)`` → row count."""
    return count_rows
