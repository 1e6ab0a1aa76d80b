"""
Typed response objects for operations.

Each dataclass is the *output* payload of one operation beyond the
generic :class:`OperationResult` envelope.  Fields are plain values
(timestamps as ISO-8601 strings, enums as their string values) so
``dataclasses.asdict`` yields JSON-ready dicts for the CLI and API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# ------------------------------------------------------------------ #
# Pipeline responses
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class CandidateSummary:
    """One action candidate plus the tier the policy assigns it."""

    action_key: str
    domain: str
    metric: str
    value: float
    operator: str
    threshold: float
    severity: str
    tier: str
    source: str
    alert_id: str | None = None


@dataclass(frozen=True, slots=True)
class RuleFailureSummary:
    rule_id: str
    action_key: str
    error: str


@dataclass(slots=True)
class GenerationReport:
    """Result payload for :func:`lifeops.ops.pipeline.generate_alerts`."""

    created: int = 0
    candidates: list[CandidateSummary] = field(default_factory=list)
    metrics: dict[str, dict[str, Any]] = field(default_factory=dict)
    failures: list[RuleFailureSummary] = field(default_factory=list)
    dry_run: bool = False


@dataclass(slots=True)
class PipelineRunResult:
    """Result payload for :func:`lifeops.ops.pipeline.run_pipeline`.

    Outside dry runs ``auto_executed + blocked`` equals ``len(candidates)``.
    """

    job_name: str
    status: str
    run_id: str | None = None
    generated: int = 0
    candidates: list[CandidateSummary] = field(default_factory=list)
    failures: list[RuleFailureSummary] = field(default_factory=list)
    auto_executed: int = 0
    approval_queued: int = 0
    blocked: int = 0
    grants_used: int = 0
    duration_ms: int = 0
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class RunSummary:
    id: str
    status: str
    started_at: str
    finished_at: str
    duration_ms: int


@dataclass(slots=True)
class JobHealthSummary:
    """Rolling window health; statistics are ``None`` with no runs."""

    window_hours: float
    total: int = 0
    successes: int | None = None
    failures: int | None = None
    success_rate: float | None = None
    avg_duration_ms: int | None = None
    consecutive_failures: int | None = None


@dataclass(slots=True)
class PipelineStatus:
    """Result payload for :func:`lifeops.ops.pipeline.get_pipeline_status`."""

    job_name: str
    health: JobHealthSummary
    last_run: RunSummary | None = None
    next_due_at: str | None = None
    overdue: bool = False
    pending_approvals: int | None = None


# ------------------------------------------------------------------ #
# Approvals & grants
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class ApprovalItemSummary:
    id: str
    title: str
    domain: str
    tier: str
    status: str
    action_key: str
    created_at: str | None = None
    updated_at: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class GrantSummary:
    action_key: str
    active: bool
    source_approval_id: str | None = None
    approved_at: str | None = None


@dataclass(frozen=True, slots=True)
class DecisionResult:
    """Result payload for :func:`lifeops.ops.approvals.decide_approval`."""

    item: ApprovalItemSummary
    grant_created: bool = False


# ------------------------------------------------------------------ #
# Rules, snapshots, alerts
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class RuleSummary:
    id: str
    domain: str
    metric: str
    operator: str
    threshold: float
    severity: str
    enabled: bool
    action_key: str


@dataclass(frozen=True, slots=True)
class SnapshotSummary:
    id: str
    domain: str
    metrics: dict[str, Any]
    captured_at: str
    source: str | None = None


@dataclass(frozen=True, slots=True)
class AlertSummary:
    id: str
    domain: str
    title: str
    severity: str
    source: str
    created_at: str


# ------------------------------------------------------------------ #
# Database
# ------------------------------------------------------------------ #


@dataclass(frozen=True, slots=True)
class DatabaseInitResult:
    """Result payload for :func:`lifeops.ops.database.initialize_database`."""

    tables_created: list[str]
    dry_run: bool = False
