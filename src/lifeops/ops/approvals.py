"""
Approval and grant operations.

Wires the approval queue and grant store to the CLI and API: list the
inbox, record a decision, list and revoke grants.
"""

from __future__ import annotations

from lifeops.core.approvals import ApprovalQueue
from lifeops.core.enums import ApprovalStatus, Decision, Tier
from lifeops.core.grants import GrantStore
from lifeops.core.logging import get_logger
from lifeops.core.models import ApprovalGrant, ApprovalQueueItem
from lifeops.core.timestamps import to_iso8601
from lifeops.ops.context import OperationContext
from lifeops.ops.requests import DecideApprovalRequest, ListApprovalsRequest, ListGrantsRequest
from lifeops.ops.responses import ApprovalItemSummary, DecisionResult, GrantSummary
from lifeops.ops.result import OperationResult, PagedResult, start_timer

logger = get_logger(__name__)


def _queue(ctx: OperationContext) -> ApprovalQueue:
    return ApprovalQueue(ctx.conn)


def _grants(ctx: OperationContext) -> GrantStore:
    return GrantStore(ctx.conn)


def list_approvals(
    ctx: OperationContext,
    request: ListApprovalsRequest | None = None,
) -> PagedResult[ApprovalItemSummary]:
    """List inbox items, newest first (pending only by default)."""
    request = request or ListApprovalsRequest()
    timer = start_timer()

    status = None
    if request.status:
        try:
            status = ApprovalStatus(request.status)
        except ValueError:
            return PagedResult.fail(
                "VALIDATION_FAILED",
                f"Unknown status '{request.status}'",
                elapsed_ms=timer.elapsed_ms,
            )

    try:
        items, total = _queue(ctx).list_items(
            status=status,
            domain=request.domain,
            limit=request.limit,
            offset=request.offset,
        )
        return PagedResult.from_items(
            [_item_to_summary(i) for i in items],
            total=total,
            limit=request.limit,
            offset=request.offset,
            elapsed_ms=timer.elapsed_ms,
        )
    except Exception as exc:
        logger.exception("op_failed", op="list_approvals", error=str(exc))
        return PagedResult.fail(
            "INTERNAL",
            f"Failed to list approvals: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )


def get_approval(ctx: OperationContext, item_id: str) -> OperationResult[ApprovalItemSummary]:
    timer = start_timer()
    try:
        item = _queue(ctx).get(item_id)
        return OperationResult.ok(_item_to_summary(item), elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)


def decide_approval(
    ctx: OperationContext,
    request: DecideApprovalRequest,
) -> OperationResult[DecisionResult]:
    """Approve or reject a pending item.

    Approving a ``yellow`` item also activates the grant for its action
    key.  Already-decided items and unknown decisions come back as
    ``CONFLICT``; unknown items as ``NOT_FOUND``.
    """
    timer = start_timer()
    queue = _queue(ctx)

    if ctx.dry_run:
        try:
            item, decision = queue.check_decidable(request.item_id, request.decision)
        except Exception as exc:
            return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)
        return OperationResult.ok(
            DecisionResult(item=_item_to_summary(item)),
            metadata={"dry_run": True, "would_decide": decision.value},
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        item = queue.decide(request.item_id, request.decision)
        ctx.conn.commit()
    except Exception as exc:
        try:
            ctx.conn.rollback()
        except Exception as rb_exc:
            logger.warning("rollback_failed", error=str(rb_exc))
        logger.warning("approval_decision_rejected", item_id=request.item_id, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    granted = item.status is ApprovalStatus.APPROVED and item.severity is Tier.YELLOW
    return OperationResult.ok(
        DecisionResult(item=_item_to_summary(item), grant_created=granted),
        elapsed_ms=timer.elapsed_ms,
    )


def approve(ctx: OperationContext, item_id: str) -> OperationResult[DecisionResult]:
    return decide_approval(ctx, DecideApprovalRequest(item_id=item_id, decision=Decision.APPROVE.value))


def reject(ctx: OperationContext, item_id: str) -> OperationResult[DecisionResult]:
    return decide_approval(ctx, DecideApprovalRequest(item_id=item_id, decision=Decision.REJECT.value))


# ------------------------------------------------------------------ #
# Grants
# ------------------------------------------------------------------ #


def list_grants(
    ctx: OperationContext,
    request: ListGrantsRequest | None = None,
) -> OperationResult[list[GrantSummary]]:
    request = request or ListGrantsRequest()
    timer = start_timer()
    try:
        grants = _grants(ctx).list_grants(active=request.active)
        return OperationResult.ok(
            [_grant_to_summary(g) for g in grants], elapsed_ms=timer.elapsed_ms,
        )
    except Exception as exc:
        logger.exception("op_failed", op="list_grants", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to list grants: {exc}",
            elapsed_ms=timer.elapsed_ms,
        )


def revoke_grant(ctx: OperationContext, action_key: str) -> OperationResult[dict]:
    """Deactivate the grant for *action_key*; later candidates queue again."""
    timer = start_timer()

    if ctx.dry_run:
        return OperationResult.ok(
            {"dry_run": True, "would_revoke": action_key},
            elapsed_ms=timer.elapsed_ms,
        )

    try:
        _grants(ctx).revoke(action_key)
        ctx.conn.commit()
    except Exception as exc:
        logger.warning("grant_revoke_failed", action_key=action_key, error=str(exc))
        return OperationResult.from_exception(exc, elapsed_ms=timer.elapsed_ms)

    return OperationResult.ok(
        {"action_key": action_key, "revoked": True}, elapsed_ms=timer.elapsed_ms,
    )


# ------------------------------------------------------------------ #
# Converters
# ------------------------------------------------------------------ #


def _item_to_summary(item: ApprovalQueueItem) -> ApprovalItemSummary:
    return ApprovalItemSummary(
        id=item.id,
        title=item.title,
        domain=item.domain,
        tier=item.severity.value,
        status=item.status.value,
        action_key=item.action_key,
        created_at=to_iso8601(item.created_at),
        updated_at=to_iso8601(item.updated_at),
        metadata=dict(item.metadata),
    )


def _grant_to_summary(grant: ApprovalGrant) -> GrantSummary:
    return GrantSummary(
        action_key=grant.action_key,
        active=grant.active,
        source_approval_id=grant.source_approval_id,
        approved_at=to_iso8601(grant.approved_at),
    )
