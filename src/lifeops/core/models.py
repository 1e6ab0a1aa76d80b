"""Domain records for the alerting and approval pipeline.

Each dataclass mirrors one table in :mod:`lifeops.core.schema` (or, for
:class:`ActionCandidate` and :class:`ThresholdHit`, a derived value that is
never stored verbatim).  ``from_row`` builders accept the dicts returned by
:class:`~lifeops.core.repository.BaseRepository.query`.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from lifeops.core.enums import ApprovalStatus, Operator, RunStatus, Severity, Tier
from lifeops.core.timestamps import from_iso8601


def format_number(value: float | int) -> str:
    """Render a number the way action keys and titles expect.

    Integral floats drop their trailing ``.0`` so ``48.0`` and ``48``
    produce the same action key.

    >>> format_number(48.0)
    '48'
    >>> format_number(12.5)
    '12.5'
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    f = float(value)
    if f.is_integer():
        return str(int(f))
    return repr(f)


def build_action_key(domain: str, metric: str, operator: Operator | str, threshold: float) -> str:
    """Deterministic ``domain:metric:operator:threshold`` key."""
    op = operator.value if isinstance(operator, Operator) else operator
    return f"{domain}:{metric}:{op}:{format_number(threshold)}"


# ---------------------------------------------------------------------------
# metric_snapshots
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class MetricSnapshot:
    """Timestamped metric values for one operational domain."""

    id: str
    domain: str
    metrics: dict[str, Any]
    captured_at: datetime
    source: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> MetricSnapshot:
        return cls(
            id=row["id"],
            domain=row["domain"],
            metrics=json.loads(row["metrics_json"] or "{}"),
            captured_at=from_iso8601(row["captured_at"]),
            source=row.get("source"),
        )


# ---------------------------------------------------------------------------
# threshold_rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ThresholdRule:
    """A configured ``metric <operator> threshold`` check."""

    id: str
    domain: str
    metric: str
    operator: Operator
    threshold: float
    severity: Severity
    enabled: bool = True

    @property
    def action_key(self) -> str:
        return build_action_key(self.domain, self.metric, self.operator, self.threshold)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ThresholdRule:
        return cls(
            id=row["id"],
            domain=row["domain"],
            metric=row["metric"],
            operator=Operator(row["operator"]),
            threshold=float(row["threshold"]),
            severity=Severity(row["severity"]),
            enabled=bool(row["enabled"]),
        )


@dataclass(frozen=True, slots=True)
class ThresholdHit:
    """A rule whose predicate held, with the observed value."""

    rule: ThresholdRule
    value: float


# ---------------------------------------------------------------------------
# Derived: action candidates
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ActionCandidate:
    """Normalized action proposed by a threshold violation.

    Two candidates with the same ``(domain, metric, operator, threshold)``
    are the same action regardless of when they were produced.
    """

    domain: str
    metric: str
    value: float
    threshold: float
    operator: Operator
    severity: Severity
    source: str
    alert_id: str | None = None

    @property
    def action_key(self) -> str:
        return build_action_key(self.domain, self.metric, self.operator, self.threshold)

    @property
    def condition(self) -> str:
        """``metric op threshold (value=...)`` fragment used in titles."""
        return (
            f"{self.metric} {self.operator.value} {format_number(self.threshold)} "
            f"(value={format_number(self.value)})"
        )


# ---------------------------------------------------------------------------
# alert_events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AlertEvent:
    """Append-only alert log entry."""

    id: str
    domain: str
    title: str
    severity: str
    source: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> AlertEvent:
        return cls(
            id=row["id"],
            domain=row["domain"],
            title=row["title"],
            severity=row["severity"],
            source=row["source"],
            created_at=from_iso8601(row["created_at"]),
        )


# ---------------------------------------------------------------------------
# approval_queue / approval_grants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ApprovalQueueItem:
    """Human-review inbox entry."""

    id: str
    title: str
    domain: str
    severity: Tier
    status: ApprovalStatus
    action_key: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ApprovalQueueItem:
        return cls(
            id=row["id"],
            title=row["title"],
            domain=row["domain"],
            severity=Tier(row["severity"]),
            status=ApprovalStatus(row["status"]),
            action_key=row["action_key"],
            metadata=json.loads(row.get("metadata_json") or "{}"),
            created_at=from_iso8601(row.get("created_at")),
            updated_at=from_iso8601(row.get("updated_at")),
        )


@dataclass(frozen=True, slots=True)
class ApprovalGrant:
    """Reusable authorization for one action key."""

    action_key: str
    active: bool
    source_approval_id: str | None
    approved_at: datetime | None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> ApprovalGrant:
        return cls(
            action_key=row["action_key"],
            active=bool(row["active"]),
            source_approval_id=row.get("source_approval_id"),
            approved_at=from_iso8601(row.get("approved_at")),
        )


# ---------------------------------------------------------------------------
# job_runs
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class JobRun:
    """One recorded pipeline invocation."""

    id: str
    job_name: str
    status: RunStatus
    started_at: datetime
    finished_at: datetime
    duration_ms: int
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> JobRun:
        return cls(
            id=row["id"],
            job_name=row["job_name"],
            status=RunStatus(row["status"]),
            started_at=from_iso8601(row["started_at"]),
            finished_at=from_iso8601(row["finished_at"]),
            duration_ms=int(row["duration_ms"]),
            details=json.loads(row.get("details_json") or "{}"),
        )
