"""
Approvals and grants router.

Endpoints:
    GET    /approvals                  List inbox items (pending by default)
    GET    /approvals/{id}             One item
    POST   /approvals/{id}/decision    Approve or reject
    GET    /grants                     List grants (active by default)
    DELETE /grants/{action_key}        Revoke a grant
"""

from __future__ import annotations

from fastapi import APIRouter, Path, Query

from lifeops.api.deps import OpContext
from lifeops.api.errors import envelope, handle_error, to_plain
from lifeops.api.schemas import DecisionBody, PageMeta

router = APIRouter(prefix="/approvals")
grants_router = APIRouter(prefix="/grants")


@router.get("")
def list_approvals(
    ctx: OpContext,
    status: str | None = Query("pending", description="pending, approved, rejected or empty for all"),
    domain: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List approval items, newest first."""
    from lifeops.ops.approvals import list_approvals as _list
    from lifeops.ops.requests import ListApprovalsRequest

    result = _list(ctx, ListApprovalsRequest(
        status=status or None, domain=domain, limit=limit, offset=offset,
    ))
    if not result.success:
        return handle_error(result)
    return {
        "data": [to_plain(i) for i in (result.data or [])],
        "page": PageMeta(
            total=result.total,
            limit=result.limit,
            offset=result.offset,
            has_more=result.has_more,
        ).model_dump(),
        "elapsed_ms": round(result.elapsed_ms, 2),
        "warnings": result.warnings,
    }


@router.get("/{item_id}")
def get_approval(ctx: OpContext, item_id: str = Path(..., description="Approval item ID")):
    from lifeops.ops.approvals import get_approval as _get

    result = _get(ctx, item_id)
    if not result.success:
        return handle_error(result)
    return envelope(result)


@router.post("/{item_id}/decision")
def decide(
    ctx: OpContext,
    body: DecisionBody,
    item_id: str = Path(..., description="Approval item ID"),
):
    """Record a decision.  Approving a yellow item grants its action key."""
    from lifeops.ops.approvals import decide_approval
    from lifeops.ops.requests import DecideApprovalRequest

    result = decide_approval(ctx, DecideApprovalRequest(item_id=item_id, decision=body.decision))
    if not result.success:
        return handle_error(result)
    return envelope(result)


@grants_router.get("")
def list_grants(
    ctx: OpContext,
    active: bool | None = Query(True, description="Filter by active flag"),
):
    from lifeops.ops.approvals import list_grants as _list
    from lifeops.ops.requests import ListGrantsRequest

    result = _list(ctx, ListGrantsRequest(active=active))
    if not result.success:
        return handle_error(result)
    return envelope(result)


@grants_router.delete("/{action_key:path}")
def revoke_grant(ctx: OpContext, action_key: str):
    """Revoke a grant; the key is URL-encoded (``work-ops%3Acatering...``)."""
    from lifeops.ops.approvals import revoke_grant as _revoke

    result = _revoke(ctx, action_key)
    if not result.success:
        return handle_error(result)
    return envelope(result)
