"""
Threshold rule operations.

CRUD for ``threshold_rules``.  A rule is unique on
``(domain, metric, operator, threshold)``; :func:`upsert_rule` updates the
severity and enabled flag of an existing key instead of inserting a twin.
The pipeline itself only ever reads enabled rules.
"""

from __future__ import annotations

import math

from lifeops.core.enums import Operator, Severity
from lifeops.core.errors import NotFoundError, ValidationError
from lifeops.core.logging import get_logger
from lifeops.core.models import ThresholdRule
from lifeops.core.repositories import ThresholdRuleRepository
from lifeops.core.thresholds import is_numeric
from lifeops.core.timestamps import new_id, to_iso8601, utc_now
from lifeops.ops.context import OperationContext
from lifeops.ops.requests import ListRulesRequest, SetRuleEnabledRequest, UpsertRuleRequest
from lifeops.ops.responses import RuleSummary
from lifeops.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def _rule_repo(ctx: OperationContext) -> ThresholdRuleRepository:
    return ThresholdRuleRepository(ctx.conn)


def validate_rule(request: UpsertRuleRequest) -> tuple[Operator, Severity, float]:
    """Check a rule definition; raises :class:`ValidationError`."""
    if not request.domain or not request.domain.strip():
        raise ValidationError("Rule domain is required", field="domain")
    if not request.metric or not request.metric.strip():
        raise ValidationError("Rule metric is required", field="metric")
    try:
        operator = Operator(request.operator)
    except ValueError as exc:
        allowed = ", ".join(o.value for o in Operator)
        raise ValidationError(
            f"Unknown operator '{request.operator}' (expected one of {allowed})",
            field="operator",
            cause=exc,
        ) from exc
    try:
        severity = Severity(request.severity)
    except ValueError as exc:
        allowed = ", ".join(s.value for s in Severity)
        raise ValidationError(
            f"Unknown severity '{request.severity}' (expected one of {allowed})",
            field="severity",
            cause=exc,
        ) from exc
    if not is_numeric(request.threshold) or math.isinf(request.threshold):
        raise ValidationError(
            f"Threshold must be a finite number, got {request.threshold!r}",
            field="threshold",
        )
    return operator, severity, float(request.threshold)


def upsert_rule(
    ctx: OperationContext,
    request: UpsertRuleRequest,
) -> OperationResult[RuleSummary]:
    """Create a rule, or update severity/enabled on an existing key."""
    timer = start_timer()

    try:
        operator, severity, threshold = validate_rule(request)
    except ValidationError as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    rule = ThresholdRule(
        id=new_id("rule"),
        domain=request.domain.strip(),
        metric=request.metric.strip(),
        operator=operator,
        threshold=threshold,
        severity=severity,
        enabled=request.enabled,
    )

    if ctx.dry_run:
        return OperationResult.ok(
            _rule_to_summary(rule),
            metadata={"dry_run": True},
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        repo = _rule_repo(ctx)
        now = to_iso8601(utc_now())
        existing = repo.get_by_key(rule.domain, rule.metric, operator.value, threshold)
        if existing is not None:
            repo.update(existing["id"], {
                "severity": severity.value,
                "enabled": 1 if request.enabled else 0,
                "updated_at": now,
            })
            rule = ThresholdRule.from_row({
                **existing,
                "severity": severity.value,
                "enabled": 1 if request.enabled else 0,
            })
            created = False
        else:
            repo.create({
                "id": rule.id,
                "domain": rule.domain,
                "metric": rule.metric,
                "operator": operator.value,
                "threshold": threshold,
                "severity": severity.value,
                "enabled": 1 if rule.enabled else 0,
                "created_at": now,
                "updated_at": now,
            })
            created = True
        ctx.conn.commit()
    except Exception as exc:
        logger.exception("op_failed", op="upsert_rule", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to save rule: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )

    logger.info("rule_saved", rule_id=rule.id, action_key=rule.action_key, created=created)
    return OperationResult.ok(
        _rule_to_summary(rule),
        metadata={"created": created},
        elapsed_ms=timer.elapsed_ms,
    )


def list_rules(
    ctx: OperationContext,
    request: ListRulesRequest | None = None,
) -> OperationResult[list[RuleSummary]]:
    request = request or ListRulesRequest()
    timer = start_timer()
    try:
        rows = _rule_repo(ctx).list_rules(enabled=request.enabled, domain=request.domain)
        return OperationResult.ok(
            [_rule_to_summary(ThresholdRule.from_row(r)) for r in rows],
            elapsed_ms=timer.elapsed_ms,
        )
    except Exception as exc:
        logger.exception("op_failed", op="list_rules", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to list rules: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )


def set_rule_enabled(
    ctx: OperationContext,
    request: SetRuleEnabledRequest,
) -> OperationResult[RuleSummary]:
    """Enable or disable one rule by id."""
    timer = start_timer()
    try:
        repo = _rule_repo(ctx)
        row = repo.get(request.rule_id)
        if row is None:
            raise NotFoundError(f"Rule '{request.rule_id}' not found")
        if not ctx.dry_run:
            repo.update(request.rule_id, {
                "enabled": 1 if request.enabled else 0,
                "updated_at": to_iso8601(utc_now()),
            })
            ctx.conn.commit()
        rule = ThresholdRule.from_row({**row, "enabled": 1 if request.enabled else 0})
    except NotFoundError as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", op="set_rule_enabled", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to update rule: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )
    return OperationResult.ok(
        _rule_to_summary(rule),
        metadata={"dry_run": True} if ctx.dry_run else None,
        elapsed_ms=timer.elapsed_ms,
    )


def _rule_to_summary(rule: ThresholdRule) -> RuleSummary:
    return RuleSummary(
        id=rule.id,
        domain=rule.domain,
        metric=rule.metric,
        operator=rule.operator.value,
        threshold=rule.threshold,
        severity=rule.severity.value,
        enabled=rule.enabled,
        action_key=rule.action_key,
    )
