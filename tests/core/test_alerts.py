"""Tests for lifeops.core.alerts -- alert generation and candidate emission."""

from __future__ import annotations

import sqlite3
from unittest.mock import MagicMock

import pytest

from lifeops.core.alerts import SOURCE_THRESHOLD_EVAL, AlertGenerator
from lifeops.core.errors import DatabaseError
from lifeops.core.repositories import AlertEventRepository
from lifeops.ops.requests import RecordSnapshotRequest
from lifeops.ops.snapshots import record_snapshot


class TestGenerate:
    def test_no_rules_is_empty_result(self, conn):
        result = AlertGenerator(conn).generate()
        assert result.created == 0
        assert result.candidates == []
        assert result.failures == []
        assert result.metrics == {}

    def test_rules_without_snapshot_is_empty_result(self, conn, add_rule):
        add_rule()
        result = AlertGenerator(conn).generate()
        assert result.created == 0
        assert result.candidates == []

    def test_hit_writes_alert_and_candidate(self, conn, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = AlertGenerator(conn).generate()

        assert result.created == 1
        assert len(result.candidates) == 1
        cand = result.candidates[0]
        assert cand.action_key == "work-ops:catering_lead_time_hours:<=:48"
        assert cand.value == 40
        assert cand.source == SOURCE_THRESHOLD_EVAL
        assert cand.alert_id.startswith("evt_")
        assert cand.alert_id.endswith("_0")
        assert result.metrics == {"work-ops": {"catering_lead_time_hours": 40}}

        alerts, total = AlertEventRepository(conn).list_alerts()
        assert total == 1
        assert alerts[0]["title"] == "catering_lead_time_hours <= 48 (value=40)"
        assert alerts[0]["severity"] == "warning"
        assert alerts[0]["source"] == "threshold_eval"
        assert alerts[0]["id"] == cand.alert_id

    def test_latest_snapshot_wins(self, conn, add_rule, add_snapshot):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)
        add_snapshot(catering_lead_time_hours=90)

        result = AlertGenerator(conn).generate()
        assert result.candidates == []

    def test_late_written_older_capture_is_evaluated(self, conn, ctx, add_rule):
        add_rule()
        for captured_at, value in (("2026-03-02T12:00:00+00:00", 96), ("2026-03-02T11:00:00+00:00", 40)):
            written = record_snapshot(ctx, RecordSnapshotRequest(
                domain="work-ops",
                metrics={"catering_lead_time_hours": value},
                captured_at=captured_at,
            ))
            assert written.success, written.error

        result = AlertGenerator(conn).generate()
        assert result.created == 1
        assert result.candidates[0].value == 40

    def test_disabled_rule_produces_nothing(self, conn, add_rule, add_snapshot):
        add_rule(enabled=False)
        add_snapshot(catering_lead_time_hours=40)
        assert AlertGenerator(conn).generate().candidates == []

    def test_each_domain_uses_its_own_snapshot(self, conn, add_rule, add_snapshot):
        add_rule()
        add_rule(domain="finance", metric="cash_buffer_days", operator="<", threshold=30,
                 severity="critical")
        add_snapshot(catering_lead_time_hours=40)
        add_snapshot(domain="finance", cash_buffer_days=12)

        result = AlertGenerator(conn).generate()
        assert sorted(c.domain for c in result.candidates) == ["finance", "work-ops"]
        assert result.created == 2

    def test_dry_run_writes_nothing(self, conn, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = AlertGenerator(conn).generate(dry_run=True)

        assert result.created == 0
        assert len(result.candidates) == 1
        assert result.candidates[0].alert_id is None
        assert rows(conn, "alert_events") == 0


class TestPartialFailure:
    def test_failed_write_skips_candidate_and_continues(self, conn, add_rule, add_snapshot):
        add_rule()
        add_rule(metric="pending_responses", operator=">", threshold=3)
        add_snapshot(catering_lead_time_hours=40, pending_responses=7)

        alerts = MagicMock()
        alerts.create.side_effect = [sqlite3.OperationalError("disk I/O error"), None]

        result = AlertGenerator(conn, alerts=alerts).generate()

        assert alerts.create.call_count == 2
        assert result.created == 1
        assert [c.metric for c in result.candidates] == ["pending_responses"]
        assert len(result.failures) == 1
        failure = result.failures[0]
        assert failure.action_key == "work-ops:catering_lead_time_hours:<=:48"
        assert "disk I/O error" in failure.error


class TestReadFailure:
    def test_rule_read_error_raises_database_error(self, conn):
        rules = MagicMock()
        rules.list_rules.side_effect = sqlite3.OperationalError("no such table")

        with pytest.raises(DatabaseError) as exc_info:
            AlertGenerator(conn, rules=rules).generate()
        assert isinstance(exc_info.value.cause, sqlite3.OperationalError)

    def test_snapshot_read_error_raises_database_error(self, conn, add_rule):
        add_rule()
        snapshots = MagicMock()
        snapshots.latest.side_effect = RuntimeError("connection reset")

        with pytest.raises(DatabaseError):
            AlertGenerator(conn, snapshots=snapshots).generate()
