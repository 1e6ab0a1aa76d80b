"""Tests for lifeops.ops.pipeline -- generate, run and status."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import patch

from lifeops.core.repositories import JobRunRepository
from lifeops.core.timestamps import from_iso8601
from lifeops.ops.alerts import list_alerts
from lifeops.ops.approvals import approve, list_approvals, list_grants
from lifeops.ops.pipeline import generate_alerts, get_pipeline_status, run_pipeline
from lifeops.ops.requests import ListAlertsRequest


def _counters(result) -> tuple[int, int, int, int]:
    d = result.data
    return d.auto_executed, d.approval_queued, d.blocked, d.grants_used


class TestGenerateAlerts:
    def test_empty(self, ctx):
        result = generate_alerts(ctx)
        assert result.success
        assert result.data.created == 0
        assert result.data.candidates == []

    def test_creates_alerts(self, ctx, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = generate_alerts(ctx)

        assert result.success
        assert result.data.created == 1
        cand = result.data.candidates[0]
        assert cand.tier == "yellow"
        assert cand.action_key == "work-ops:catering_lead_time_hours:<=:48"
        assert rows(ctx.conn, "alert_events") == 1
        assert rows(ctx.conn, "approval_queue") == 0

    def test_dry_run(self, dry_ctx, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = generate_alerts(dry_ctx)

        assert result.success
        assert result.data.dry_run is True
        assert len(result.data.candidates) == 1
        assert rows(dry_ctx.conn, "alert_events") == 0

    def test_read_failure(self, ctx):
        with patch(
            "lifeops.core.repositories.ThresholdRuleRepository.list_rules",
            side_effect=RuntimeError("no such table"),
        ):
            result = generate_alerts(ctx)
        assert not result.success
        assert result.error.code == "INTERNAL"
        assert "Alert generation failed" in result.error.message


class TestRunPipeline:
    def test_nothing_to_do(self, ctx, rows):
        result = run_pipeline(ctx)
        assert result.success
        assert result.data.status == "success"
        assert result.data.generated == 0
        assert _counters(result) == (0, 0, 0, 0)
        assert rows(ctx.conn, "job_runs") == 1

    def test_catering_approve_once_flow(self, ctx, add_rule, add_snapshot):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        first = run_pipeline(ctx)
        assert first.success
        assert first.data.generated == 1
        assert _counters(first) == (0, 1, 1, 0)

        inbox = list_approvals(ctx)
        assert inbox.total == 1
        item = inbox.data[0]
        assert item.tier == "yellow"
        assert item.title.startswith("[YELLOW] work-ops action gate")

        decision = approve(ctx, item.id)
        assert decision.success
        assert decision.data.grant_created is True
        assert [g.action_key for g in list_grants(ctx).data] == [item.action_key]

        second = run_pipeline(ctx)
        assert second.success
        assert _counters(second) == (1, 0, 0, 1)

        actions = list_alerts(ctx, ListAlertsRequest(source="policy_dispatch"))
        assert actions.total == 1
        assert actions.data[0].title == (
            "AUTO ACTION (yellow-approved-once) - catering_lead_time_hours <= 48 (value=40)"
        )

    def test_repeat_runs_do_not_flood_inbox(self, ctx, add_rule, add_snapshot):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        run_pipeline(ctx)
        again = run_pipeline(ctx)

        assert _counters(again) == (0, 0, 1, 0)
        assert list_approvals(ctx).total == 1

    def test_finance_is_never_auto_executed(self, ctx, add_rule, add_snapshot):
        add_rule(domain="finance", metric="cash_buffer_days", operator="<", threshold=30)
        add_snapshot(domain="finance", cash_buffer_days=12)

        run_pipeline(ctx)
        item = list_approvals(ctx).data[0]
        assert item.tier == "red"

        decision = approve(ctx, item.id)
        assert decision.success
        assert decision.data.grant_created is False

        again = run_pipeline(ctx)
        assert _counters(again) == (0, 1, 1, 0)
        assert list_grants(ctx).data == []

    def test_green_auto_executes(self, ctx, add_rule, add_snapshot):
        add_rule(domain="home", metric="filter_age_days", operator=">", threshold=90,
                 severity="info")
        add_snapshot(domain="home", filter_age_days=95)

        result = run_pipeline(ctx)

        assert _counters(result) == (1, 0, 0, 0)
        assert result.data.candidates[0].tier == "green"

    def test_run_is_recorded(self, ctx, add_rule, add_snapshot):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = run_pipeline(ctx)

        runs = JobRunRepository(ctx.conn).recent(ctx.job_name, 5)
        assert len(runs) == 1
        assert runs[0]["id"] == result.data.run_id
        assert runs[0]["status"] == "success"

    def test_dry_run_writes_nothing(self, dry_ctx, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        result = run_pipeline(dry_ctx)

        assert result.success
        assert result.data.status == "dry_run"
        assert result.data.candidates[0].tier == "yellow"
        for table in ("alert_events", "approval_queue", "job_runs"):
            assert rows(dry_ctx.conn, table) == 0

    def test_run_record_failure_is_a_warning(self, ctx):
        with patch.object(JobRunRepository, "create", side_effect=RuntimeError("readonly")):
            result = run_pipeline(ctx)
        assert result.success
        assert result.data.run_id is None
        assert any("run record not written" in w for w in result.warnings)


class TestRunPipelineFailure:
    def _failing_dispatch(self):
        patcher = patch("lifeops.ops.pipeline.PolicyDispatcher")
        dispatcher_cls = patcher.start()
        dispatcher_cls.return_value.dispatch.side_effect = RuntimeError("policy store offline")
        return patcher

    def test_failure_is_reported_and_recorded(self, ctx, add_rule, add_snapshot, rows):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)

        patcher = self._failing_dispatch()
        try:
            result = run_pipeline(ctx)
        finally:
            patcher.stop()

        assert not result.success
        assert result.error.code == "PIPELINE_FAILED"
        assert "dispatch" in result.error.message
        assert result.error.details["stage"] == "dispatch"

        runs = JobRunRepository(ctx.conn).recent(ctx.job_name, 5)
        assert [r["status"] for r in runs] == ["failed"]
        # generation was committed before dispatch broke
        assert rows(ctx.conn, "alert_events", "source = ?", ("threshold_eval",)) == 1

    def test_second_consecutive_failure_escalates_once(self, ctx, rows):
        patcher = self._failing_dispatch()
        try:
            results = [run_pipeline(ctx) for _ in range(3)]
        finally:
            patcher.stop()

        assert all(r.error.code == "PIPELINE_FAILED" for r in results)
        escalations = list_alerts(ctx, ListAlertsRequest(source="job_monitor"))
        assert escalations.total == 1
        assert escalations.data[0].severity == "critical"
        assert rows(ctx.conn, "job_runs", "status = ?", ("failed",)) == 3

    def test_recovery_rearms_escalation(self, ctx):
        for _ in range(2):
            patcher = self._failing_dispatch()
            try:
                run_pipeline(ctx)
            finally:
                patcher.stop()
        assert run_pipeline(ctx).success
        for _ in range(2):
            patcher = self._failing_dispatch()
            try:
                run_pipeline(ctx)
            finally:
                patcher.stop()

        escalations = list_alerts(ctx, ListAlertsRequest(source="job_monitor"))
        assert escalations.total == 2

    def test_unrecorded_failure_skips_escalation(self, ctx):
        patcher = self._failing_dispatch()
        try:
            with patch.object(JobRunRepository, "create", side_effect=RuntimeError("readonly")):
                result = run_pipeline(ctx)
        finally:
            patcher.stop()

        assert result.error.code == "PIPELINE_FAILED"
        assert any("run record not written" in w for w in result.warnings)
        assert list_alerts(ctx, ListAlertsRequest(source="job_monitor")).total == 0

    def test_generation_failure(self, ctx):
        with patch(
            "lifeops.core.repositories.ThresholdRuleRepository.list_rules",
            side_effect=RuntimeError("no such table"),
        ):
            result = run_pipeline(ctx)
        assert result.error.code == "PIPELINE_FAILED"
        assert result.error.details["stage"] == "generate"

    def test_failed_dry_runs_record_nothing(self, dry_ctx, rows):
        with patch(
            "lifeops.core.repositories.ThresholdRuleRepository.list_rules",
            side_effect=RuntimeError("no such table"),
        ):
            results = [run_pipeline(dry_ctx) for _ in range(2)]

        for result in results:
            assert result.error.code == "PIPELINE_FAILED"
            assert result.warnings == []
        assert rows(dry_ctx.conn, "job_runs") == 0
        assert rows(dry_ctx.conn, "alert_events") == 0

    def test_escalation_write_failure_is_a_warning(self, ctx, rows):
        patcher = self._failing_dispatch()
        try:
            run_pipeline(ctx)
            with patch(
                "lifeops.core.alerts.AlertWriter.write",
                side_effect=RuntimeError("disk I/O error"),
            ):
                result = run_pipeline(ctx)
        finally:
            patcher.stop()

        assert result.error.code == "PIPELINE_FAILED"
        assert any("escalation check failed" in w for w in result.warnings)
        assert rows(ctx.conn, "job_runs", "status = ?", ("failed",)) == 2
        assert list_alerts(ctx, ListAlertsRequest(source="job_monitor")).total == 0


class TestPipelineStatus:
    def test_before_first_run(self, ctx):
        result = get_pipeline_status(ctx)
        assert result.success
        status = result.data
        assert status.job_name == "lifeops_pipeline"
        assert status.health.total == 0
        assert status.health.success_rate is None
        assert status.health.window_hours == 24
        assert status.last_run is None
        assert status.next_due_at is None
        assert status.overdue is False
        assert status.pending_approvals == 0

    def test_after_run(self, ctx, add_rule, add_snapshot):
        add_rule()
        add_snapshot(catering_lead_time_hours=40)
        run_pipeline(ctx)

        status = get_pipeline_status(ctx).data

        assert status.health.total == 1
        assert status.health.success_rate == 100.0
        assert status.health.consecutive_failures == 0
        assert status.last_run.status == "success"
        due = from_iso8601(status.next_due_at)
        assert due == from_iso8601(status.last_run.finished_at) + timedelta(minutes=30)
        assert status.overdue is False
        assert status.pending_approvals == 1

    def test_health_read_failure_is_a_warning(self, ctx):
        with patch.object(JobRunRepository, "since", side_effect=RuntimeError("locked")):
            result = get_pipeline_status(ctx)
        assert result.success
        assert result.data.health.total == 0
        assert any("health unavailable" in w for w in result.warnings)
