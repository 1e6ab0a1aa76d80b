"""Tests for lifeops.core.models -- action keys and row builders."""

from __future__ import annotations

import json

from lifeops.core.enums import ApprovalStatus, Operator, RunStatus, Severity, Tier
from lifeops.core.models import (
    ActionCandidate,
    ApprovalQueueItem,
    JobRun,
    ThresholdRule,
    build_action_key,
    format_number,
)


class TestFormatNumber:
    def test_integral_float_drops_fraction(self):
        assert format_number(48.0) == "48"

    def test_int(self):
        assert format_number(48) == "48"

    def test_fraction_kept(self):
        assert format_number(12.5) == "12.5"

    def test_negative(self):
        assert format_number(-3.0) == "-3"


class TestActionKey:
    def test_shape(self):
        assert build_action_key("work-ops", "catering_lead_time_hours", Operator.LE, 48.0) == (
            "work-ops:catering_lead_time_hours:<=:48"
        )

    def test_eq_alias_kept_verbatim(self):
        assert build_action_key("home", "m", Operator.EQ_ALIAS, 1) == "home:m:==:1"
        assert build_action_key("home", "m", Operator.EQ, 1) == "home:m:=:1"

    def test_int_and_float_threshold_agree(self):
        assert build_action_key("d", "m", ">", 5) == build_action_key("d", "m", ">", 5.0)

    def test_candidate_key_ignores_value_and_severity(self):
        a = ActionCandidate("d", "m", 1, 5, Operator.GT, Severity.INFO, "threshold_eval")
        b = ActionCandidate("d", "m", 9, 5.0, Operator.GT, Severity.CRITICAL, "threshold_eval", "evt_x")
        assert a.action_key == b.action_key

    def test_candidate_matches_rule_key(self):
        rule = ThresholdRule("r", "d", "m", Operator.GE, 2.5, Severity.WARNING)
        cand = ActionCandidate("d", "m", 3, 2.5, Operator.GE, Severity.WARNING, "threshold_eval")
        assert rule.action_key == cand.action_key == "d:m:>=:2.5"

    def test_condition(self):
        cand = ActionCandidate(
            "work-ops", "catering_lead_time_hours", 40, 48.0, Operator.LE,
            Severity.WARNING, "threshold_eval",
        )
        assert cand.condition == "catering_lead_time_hours <= 48 (value=40)"


class TestFromRow:
    def test_approval_item(self):
        item = ApprovalQueueItem.from_row({
            "id": "ap_1",
            "title": "t",
            "domain": "finance",
            "severity": "red",
            "status": "pending",
            "action_key": "finance:m:>:1",
            "metadata_json": json.dumps({"policy": "red"}),
            "created_at": "2026-01-01T00:00:00.000000+00:00",
            "updated_at": "2026-01-01T00:00:00.000000+00:00",
        })
        assert item.severity is Tier.RED
        assert item.status is ApprovalStatus.PENDING
        assert item.metadata == {"policy": "red"}
        assert item.created_at.tzinfo is not None

    def test_job_run_without_details(self):
        run = JobRun.from_row({
            "id": "run_1",
            "job_name": "lifeops_pipeline",
            "status": "failed",
            "started_at": "2026-01-01T00:00:00.000000+00:00",
            "finished_at": "2026-01-01T00:00:01.000000+00:00",
            "duration_ms": 1000,
            "details_json": None,
        })
        assert run.status is RunStatus.FAILED
        assert run.details == {}
