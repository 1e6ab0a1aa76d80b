"""
Alert listing.

Alert events are append-only and written by the pipeline (threshold hits,
auto-executed actions, escalations); operators only read them.
"""

from __future__ import annotations

from lifeops.core.logging import get_logger
from lifeops.core.models import AlertEvent
from lifeops.core.repositories import AlertEventRepository
from lifeops.core.timestamps import to_iso8601
from lifeops.ops.context import OperationContext
from lifeops.ops.requests import ListAlertsRequest
from lifeops.ops.responses import AlertSummary
from lifeops.ops.result import PagedResult, start_timer

logger = get_logger(__name__)


def list_alerts(
    ctx: OperationContext,
    request: ListAlertsRequest | None = None,
) -> PagedResult[AlertSummary]:
    """List alert events, newest first."""
    request = request or ListAlertsRequest()
    timer = start_timer()

    try:
        rows, total = AlertEventRepository(ctx.conn).list_alerts(
            domain=request.domain,
            severity=request.severity,
            source=request.source,
            limit=request.limit,
            offset=request.offset,
        )
        return PagedResult.from_items(
            [_event_to_summary(AlertEvent.from_row(r)) for r in rows],
            total=total,
            limit=request.limit,
            offset=request.offset,
            elapsed_ms=timer.elapsed_ms,
        )
    except Exception as exc:
        logger.exception("op_failed", op="list_alerts", error=str(exc))
        return PagedResult.fail(
            "INTERNAL",
            f"Failed to list alerts: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )


def _event_to_summary(event: AlertEvent) -> AlertSummary:
    return AlertSummary(
        id=event.id,
        domain=event.domain,
        title=event.title,
        severity=event.severity,
        source=event.source,
        created_at=to_iso8601(event.created_at),
    )
