"""
Metric snapshot operations.

Snapshots are normally written by an ingestion job; :func:`record_snapshot`
is the entry point for that job, for operators and for tests.  Only
numeric metric values are accepted so the evaluator never sees junk.
"""

from __future__ import annotations

import json

from lifeops.core.errors import ValidationError
from lifeops.core.logging import get_logger
from lifeops.core.models import MetricSnapshot
from lifeops.core.repositories import SnapshotRepository
from lifeops.core.thresholds import is_numeric
from lifeops.core.timestamps import from_iso8601, new_id, to_iso8601, utc_now
from lifeops.ops.context import OperationContext
from lifeops.ops.requests import RecordSnapshotRequest
from lifeops.ops.responses import SnapshotSummary
from lifeops.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def _validate(request: RecordSnapshotRequest) -> MetricSnapshot:
    if not request.domain or not request.domain.strip():
        raise ValidationError("Snapshot domain is required", field="domain")
    if not request.metrics:
        raise ValidationError("Snapshot needs at least one metric", field="metrics")
    bad = sorted(k for k, v in request.metrics.items() if not is_numeric(v))
    if bad:
        raise ValidationError(
            f"Non-numeric metric values: {', '.join(bad)}",
            field="metrics",
            context={"metrics": bad},
        )
    try:
        captured_at = from_iso8601(request.captured_at) if request.captured_at else utc_now()
    except ValueError as exc:
        raise ValidationError(
            f"Invalid captured_at '{request.captured_at}'", field="captured_at", cause=exc,
        ) from exc
    return MetricSnapshot(
        id=new_id("snap"),
        domain=request.domain.strip(),
        metrics=dict(request.metrics),
        captured_at=captured_at,
        source=request.source,
    )


def record_snapshot(
    ctx: OperationContext,
    request: RecordSnapshotRequest,
) -> OperationResult[SnapshotSummary]:
    timer = start_timer()
    try:
        snapshot = _validate(request)
    except ValidationError as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    summary = SnapshotSummary(
        id=snapshot.id,
        domain=snapshot.domain,
        metrics=snapshot.metrics,
        captured_at=to_iso8601(snapshot.captured_at),
        source=snapshot.source,
    )
    if ctx.dry_run:
        return OperationResult.ok(summary, metadata={"dry_run": True}, elapsed_ms=timer.elapsed_ms)

    try:
        SnapshotRepository(ctx.conn).create({
            "id": snapshot.id,
            "domain": snapshot.domain,
            "metrics_json": json.dumps(snapshot.metrics),
            "source": snapshot.source,
            "captured_at": summary.captured_at,
        })
        ctx.conn.commit()
    except Exception as exc:
        logger.exception("op_failed", op="record_snapshot", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to record snapshot: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )

    logger.info("snapshot_recorded", domain=snapshot.domain, metrics=len(snapshot.metrics))
    return OperationResult.ok(summary, elapsed_ms=timer.elapsed_ms)
