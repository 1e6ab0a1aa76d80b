"""
Typed request objects for operations.

Each dataclass is the *input* contract for one operation function.
Requests carry transport-agnostic data only (no HTTP bodies, no Typer
params); validation of values happens inside the operation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ------------------------------------------------------------------ #
# Approvals & grants
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ListApprovalsRequest:
    """Request for :func:`lifeops.ops.approvals.list_approvals`.

    ``status`` defaults to ``"pending"``; pass ``None`` for every status.
    """

    status: str | None = "pending"
    domain: str | None = None
    limit: int = 50
    offset: int = 0


@dataclass(frozen=True, slots=True)
class DecideApprovalRequest:
    """Request for :func:`lifeops.ops.approvals.decide_approval`."""

    item_id: str = ""
    decision: str = ""


@dataclass(frozen=True, slots=True)
class ListGrantsRequest:
    active: bool | None = True


# ------------------------------------------------------------------ #
# Threshold rules
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class UpsertRuleRequest:
    """Request for :func:`lifeops.ops.rules.upsert_rule`.

    A rule is identified by ``(domain, metric, operator, threshold)``;
    upserting an existing key updates its severity and enabled flag.
    """

    domain: str = ""
    metric: str = ""
    operator: str = ""
    threshold: float = 0.0
    severity: str = "warning"
    enabled: bool = True


@dataclass(frozen=True, slots=True)
class ListRulesRequest:
    domain: str | None = None
    enabled: bool | None = None


@dataclass(frozen=True, slots=True)
class SetRuleEnabledRequest:
    rule_id: str = ""
    enabled: bool = True


# ------------------------------------------------------------------ #
# Snapshots & alerts
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class RecordSnapshotRequest:
    """Request for :func:`lifeops.ops.snapshots.record_snapshot`.

    Attributes:
        domain: Operational domain the metrics belong to.
        metrics: Metric name → numeric value.
        source: Free-form origin label (``"manual"``, ``"ingest"``, ...).
        captured_at: ISO-8601 capture time; defaults to now.
    """

    domain: str = ""
    metrics: dict[str, Any] = field(default_factory=dict)
    source: str | None = None
    captured_at: str | None = None


@dataclass(frozen=True, slots=True)
class ListAlertsRequest:
    """Request for :func:`lifeops.ops.alerts.list_alerts`."""

    domain: str | None = None
    severity: str | None = None
    source: str | None = None
    limit: int = 50
    offset: int = 0
