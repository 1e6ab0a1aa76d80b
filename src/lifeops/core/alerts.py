"""
Alert and candidate generation.

Turns evaluator hits into persisted :class:`AlertEvent` rows and normalized
:class:`ActionCandidate` values for the policy dispatcher.

Flow::

    enabled rules ─┐
                   ├─► evaluate() per domain ─► hits ─► alert_events rows
    latest snapshot┘                                 └► ActionCandidate[]

Failure model:
    - Reading rules or snapshots fails → :class:`DatabaseError` propagates;
      the caller cannot tell "nothing to do" from "could not look".
    - Writing one alert fails → that rule is listed in
      ``GenerationResult.failures``, no candidate is emitted for it, and the
      remaining rules are still processed.
    - Zero hits → an explicit empty :class:`GenerationResult`, never an error.

Tags:
    alerts, candidates, generation, partial-failure, lifeops
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lifeops.core.errors import DatabaseError
from lifeops.core.logging import get_logger
from lifeops.core.models import (
    ActionCandidate,
    AlertEvent,
    MetricSnapshot,
    ThresholdHit,
    ThresholdRule,
    format_number,
)
from lifeops.core.protocols import Connection
from lifeops.core.repositories import (
    AlertEventRepository,
    SnapshotRepository,
    ThresholdRuleRepository,
)
from lifeops.core.thresholds import evaluate
from lifeops.core.timestamps import new_id, to_iso8601, utc_now

logger = get_logger(__name__)

SOURCE_THRESHOLD_EVAL = "threshold_eval"


@dataclass(frozen=True, slots=True)
class RuleFailure:
    """A hit whose alert could not be written."""

    rule_id: str
    action_key: str
    error: str


@dataclass(slots=True)
class GenerationResult:
    """Outcome of one generation pass."""

    created: int = 0
    candidates: list[ActionCandidate] = field(default_factory=list)
    metrics: dict[str, dict[str, Any]] = field(default_factory=dict)
    failures: list[RuleFailure] = field(default_factory=list)


class AlertWriter:
    """Appends rows to ``alert_events``."""

    def __init__(self, repo: AlertEventRepository) -> None:
        self.repo = repo

    def write(
        self,
        *,
        domain: str,
        title: str,
        severity: str,
        source: str,
        prefix: str = "evt",
        seq: int | None = None,
    ) -> AlertEvent:
        event = AlertEvent(
            id=new_id(prefix, seq),
            domain=domain,
            title=title,
            severity=severity,
            source=source,
            created_at=utc_now(),
        )
        self.repo.create({
            "id": event.id,
            "domain": event.domain,
            "title": event.title,
            "severity": event.severity,
            "source": event.source,
            "created_at": to_iso8601(event.created_at),
        })
        return event


def hit_title(hit: ThresholdHit) -> str:
    """``metric op threshold (value=...)``"""
    rule = hit.rule
    return (
        f"{rule.metric} {rule.operator.value} {format_number(rule.threshold)} "
        f"(value={format_number(hit.value)})"
    )


class AlertGenerator:
    """Evaluate enabled rules against the latest snapshots and persist hits.

    Example:
        >>> gen = AlertGenerator(conn)
        >>> result = gen.generate()
        >>> result.created, len(result.candidates)
        (1, 1)
    """

    def __init__(
        self,
        conn: Connection,
        *,
        rules: ThresholdRuleRepository | None = None,
        snapshots: SnapshotRepository | None = None,
        alerts: AlertEventRepository | None = None,
    ) -> None:
        self.rules = rules or ThresholdRuleRepository(conn)
        self.snapshots = snapshots or SnapshotRepository(conn)
        self.writer = AlertWriter(alerts or AlertEventRepository(conn))

    def load_inputs(self) -> tuple[list[ThresholdRule], dict[str, MetricSnapshot]]:
        """Enabled rules plus the latest snapshot for each domain they cover."""
        try:
            rules = [ThresholdRule.from_row(r) for r in self.rules.list_rules(enabled=True)]
            snapshots: dict[str, MetricSnapshot] = {}
            for domain in dict.fromkeys(r.domain for r in rules):
                row = self.snapshots.latest(domain)
                if row is not None:
                    snapshots[domain] = MetricSnapshot.from_row(row)
        except DatabaseError:
            raise
        except Exception as exc:
            raise DatabaseError("Failed to load rules or snapshots", cause=exc) from exc
        return rules, snapshots

    def evaluate(self) -> tuple[list[ThresholdHit], dict[str, dict[str, Any]]]:
        """Hits for every domain, without writing anything."""
        rules, snapshots = self.load_inputs()
        hits: list[ThresholdHit] = []
        for domain, snapshot in snapshots.items():
            hits.extend(evaluate([r for r in rules if r.domain == domain], snapshot))
        metrics = {domain: dict(s.metrics) for domain, s in snapshots.items()}
        return hits, metrics

    def generate(self, *, dry_run: bool = False) -> GenerationResult:
        hits, metrics = self.evaluate()
        result = GenerationResult(metrics=metrics)
        if not hits:
            logger.info("generation_empty", domains=list(metrics))
            return result

        for seq, hit in enumerate(hits):
            rule = hit.rule
            alert_id: str | None = None
            if not dry_run:
                try:
                    event = self.writer.write(
                        domain=rule.domain,
                        title=hit_title(hit),
                        severity=rule.severity.value,
                        source=SOURCE_THRESHOLD_EVAL,
                        seq=seq,
                    )
                except Exception as exc:
                    logger.warning(
                        "alert_write_failed",
                        rule_id=rule.id,
                        action_key=rule.action_key,
                        error=str(exc),
                    )
                    result.failures.append(
                        RuleFailure(rule_id=rule.id, action_key=rule.action_key, error=str(exc))
                    )
                    continue
                alert_id = event.id
                result.created += 1

            result.candidates.append(
                ActionCandidate(
                    domain=rule.domain,
                    metric=rule.metric,
                    value=hit.value,
                    threshold=rule.threshold,
                    operator=rule.operator,
                    severity=rule.severity,
                    source=SOURCE_THRESHOLD_EVAL,
                    alert_id=alert_id,
                )
            )

        logger.info(
            "generation_completed",
            hits=len(hits),
            created=result.created,
            failed=len(result.failures),
            dry_run=dry_run,
        )
        return result


__all__ = [
    "SOURCE_THRESHOLD_EVAL",
    "AlertGenerator",
    "AlertWriter",
    "GenerationResult",
    "RuleFailure",
    "hit_title",
]
