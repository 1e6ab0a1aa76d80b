"""Tests for lifeops.ops.alerts and lifeops.ops.database."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from lifeops.core.alerts import AlertWriter
from lifeops.core.repositories import AlertEventRepository
from lifeops.ops.alerts import list_alerts
from lifeops.ops.context import OperationContext
from lifeops.ops.database import initialize_database
from lifeops.ops.requests import ListAlertsRequest


def _write(conn, n: int, **kw) -> None:
    writer = AlertWriter(AlertEventRepository(conn))
    for i in range(n):
        writer.write(
            domain=kw.get("domain", "work-ops"),
            title=f"alert {i}",
            severity=kw.get("severity", "warning"),
            source=kw.get("source", "threshold_eval"),
        )


class TestListAlerts:
    def test_empty(self, ctx):
        result = list_alerts(ctx)
        assert result.success
        assert result.data == []
        assert result.total == 0

    def test_newest_first_with_paging(self, ctx):
        _write(ctx.conn, 3)
        result = list_alerts(ctx, ListAlertsRequest(limit=2))
        assert [a.title for a in result.data] == ["alert 2", "alert 1"]
        assert result.total == 3
        assert result.has_more is True

    def test_filters(self, ctx):
        _write(ctx.conn, 2)
        _write(ctx.conn, 1, domain="system", severity="critical", source="job_monitor")
        assert list_alerts(ctx, ListAlertsRequest(source="job_monitor")).total == 1
        assert list_alerts(ctx, ListAlertsRequest(severity="warning")).total == 2
        assert list_alerts(ctx, ListAlertsRequest(domain="finance")).total == 0

    @patch("lifeops.ops.alerts.AlertEventRepository")
    def test_store_failure(self, mock_repo_cls, ctx):
        mock_repo_cls.return_value.list_alerts.side_effect = RuntimeError("locked")
        result = list_alerts(ctx)
        assert not result.success
        assert result.error.code == "INTERNAL"


class TestInitializeDatabase:
    def test_idempotent(self, ctx):
        first = initialize_database(ctx)
        second = initialize_database(ctx)
        assert first.success and second.success
        assert "approval_queue" in second.data.tables_created

    def test_dry_run(self, dry_ctx):
        result = initialize_database(dry_ctx)
        assert result.data.dry_run is True

    def test_failure(self):
        conn = MagicMock()
        conn.execute.side_effect = RuntimeError("readonly")
        result = initialize_database(OperationContext(conn=conn))
        assert result.error.code == "INTERNAL"
