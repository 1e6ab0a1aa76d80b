"""Tests for lifeops.core.thresholds -- comparison and rule evaluation."""

from __future__ import annotations

import math

import pytest

from lifeops.core.enums import Operator, Severity
from lifeops.core.models import MetricSnapshot, ThresholdRule
from lifeops.core.thresholds import compare, evaluate, is_numeric
from lifeops.core.timestamps import utc_now


def _rule(
    metric: str = "catering_lead_time_hours",
    operator: Operator = Operator.LE,
    threshold: float = 48,
    domain: str = "work-ops",
    enabled: bool = True,
    rule_id: str = "rule_1",
) -> ThresholdRule:
    return ThresholdRule(
        id=rule_id,
        domain=domain,
        metric=metric,
        operator=operator,
        threshold=threshold,
        severity=Severity.WARNING,
        enabled=enabled,
    )


def _snapshot(domain: str = "work-ops", **metrics) -> MetricSnapshot:
    return MetricSnapshot(id="snap_1", domain=domain, metrics=metrics, captured_at=utc_now())


class TestCompare:
    @pytest.mark.parametrize(
        ("op", "value", "threshold", "expected"),
        [
            ("<", 40, 48, True),
            ("<", 48, 48, False),
            ("<=", 48, 48, True),
            ("<=", 48.5, 48, False),
            (">", 5, 3, True),
            (">", 3, 3, False),
            (">=", 3, 3, True),
            (">=", 2.99, 3, False),
            ("=", 3, 3.0, True),
            ("=", 3.1, 3, False),
            ("==", 3, 3, True),
        ],
    )
    def test_operators(self, op, value, threshold, expected):
        assert compare(op, value, threshold) is expected

    def test_float_equality_is_exact(self):
        assert compare(Operator.EQ, 0.1 + 0.2, 0.3) is False

    def test_unknown_operator_never_matches(self):
        assert compare("!=", 1, 2) is False
        assert compare("~", 1, 1) is False

    @pytest.mark.parametrize("value", [True, False, "40", None, [40], {"v": 40}, math.nan])
    def test_non_numeric_values_never_match(self, value):
        assert compare(Operator.LE, value, 48) is False
        assert compare(Operator.GE, value, -1) is False

    def test_is_numeric(self):
        assert is_numeric(1)
        assert is_numeric(1.5)
        assert is_numeric(-math.inf)
        assert not is_numeric(True)
        assert not is_numeric("1")
        assert not is_numeric(math.nan)


class TestEvaluate:
    def test_no_snapshot_means_no_hits(self):
        assert evaluate([_rule()], None) == []

    def test_hit_carries_observed_value(self):
        hits = evaluate([_rule()], _snapshot(catering_lead_time_hours=40))
        assert len(hits) == 1
        assert hits[0].value == 40
        assert hits[0].rule.id == "rule_1"

    def test_no_hit_when_predicate_false(self):
        assert evaluate([_rule()], _snapshot(catering_lead_time_hours=72)) == []

    def test_disabled_rule_is_skipped(self):
        assert evaluate([_rule(enabled=False)], _snapshot(catering_lead_time_hours=40)) == []

    def test_other_domain_is_skipped(self):
        rule = _rule(domain="finance")
        assert evaluate([rule], _snapshot(catering_lead_time_hours=40)) == []

    def test_missing_metric_is_skipped(self):
        assert evaluate([_rule()], _snapshot(open_tickets=3)) == []

    def test_string_metric_is_not_coerced(self):
        assert evaluate([_rule()], _snapshot(catering_lead_time_hours="40")) == []

    def test_rule_order_is_preserved(self):
        rules = [
            _rule(metric="b", operator=Operator.GT, threshold=0, rule_id="r_b"),
            _rule(metric="a", operator=Operator.GT, threshold=0, rule_id="r_a"),
            _rule(metric="c", operator=Operator.GT, threshold=100, rule_id="r_c"),
        ]
        hits = evaluate(rules, _snapshot(a=1, b=2, c=3))
        assert [h.rule.id for h in hits] == ["r_b", "r_a"]

    def test_eq_alias_matches_like_eq(self):
        rules = [
            _rule(metric="m", operator=Operator.EQ, threshold=5, rule_id="eq"),
            _rule(metric="m", operator=Operator.EQ_ALIAS, threshold=5, rule_id="alias"),
        ]
        hits = evaluate(rules, _snapshot(m=5))
        assert [h.rule.id for h in hits] == ["eq", "alias"]
