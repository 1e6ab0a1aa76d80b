"""Tests for lifeops.ops.approvals -- inbox and grant operations."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from lifeops.core.enums import Tier
from lifeops.core.policy import PolicyDispatcher
from lifeops.ops.approvals import (
    approve,
    decide_approval,
    get_approval,
    list_approvals,
    list_grants,
    reject,
    revoke_grant,
)
from lifeops.ops.requests import DecideApprovalRequest, ListApprovalsRequest, ListGrantsRequest


@pytest.fixture()
def pending_item(ctx, make_candidate):
    """Queue one yellow catering item and return its summary."""
    PolicyDispatcher(ctx.conn).dispatch([make_candidate()])
    ctx.conn.commit()
    return list_approvals(ctx).data[0]


class TestListApprovals:
    def test_empty(self, ctx):
        result = list_approvals(ctx)
        assert result.success
        assert result.data == []
        assert result.total == 0
        assert result.has_more is False

    def test_pending_only_by_default(self, ctx, pending_item):
        reject(ctx, pending_item.id)
        assert list_approvals(ctx).total == 0
        everything = list_approvals(ctx, ListApprovalsRequest(status=None))
        assert everything.total == 1
        assert everything.data[0].status == "rejected"

    def test_domain_filter(self, ctx, pending_item):
        assert list_approvals(ctx, ListApprovalsRequest(domain="work-ops")).total == 1
        assert list_approvals(ctx, ListApprovalsRequest(domain="finance")).total == 0

    def test_paging(self, ctx, make_candidate):
        PolicyDispatcher(ctx.conn).dispatch(
            [make_candidate(metric=f"m{i}") for i in range(3)]
        )
        page = list_approvals(ctx, ListApprovalsRequest(limit=2))
        assert len(page.data) == 2
        assert page.total == 3
        assert page.has_more is True

    def test_unknown_status(self, ctx):
        result = list_approvals(ctx, ListApprovalsRequest(status="snoozed"))
        assert not result.success
        assert result.error.code == "VALIDATION_FAILED"

    def test_store_failure(self, ctx):
        with patch("lifeops.ops.approvals._queue", side_effect=RuntimeError("locked")):
            result = list_approvals(ctx)
        assert result.error.code == "INTERNAL"


class TestGetApproval:
    def test_found(self, ctx, pending_item):
        result = get_approval(ctx, pending_item.id)
        assert result.success
        assert result.data.metadata["policy"] == Tier.YELLOW.value

    def test_missing(self, ctx):
        assert get_approval(ctx, "ap_nope").error.code == "NOT_FOUND"


class TestDecideApproval:
    def test_approve_yellow(self, ctx, pending_item):
        result = approve(ctx, pending_item.id)
        assert result.success
        assert result.data.item.status == "approved"
        assert result.data.grant_created is True

    def test_reject(self, ctx, pending_item):
        result = reject(ctx, pending_item.id)
        assert result.data.item.status == "rejected"
        assert result.data.grant_created is False
        assert list_grants(ctx).data == []

    def test_already_decided_is_conflict(self, ctx, pending_item):
        approve(ctx, pending_item.id)
        result = reject(ctx, pending_item.id)
        assert not result.success
        assert result.error.code == "CONFLICT"
        assert get_approval(ctx, pending_item.id).data.status == "approved"

    def test_unknown_decision_is_conflict(self, ctx, pending_item):
        result = decide_approval(
            ctx, DecideApprovalRequest(item_id=pending_item.id, decision="later"),
        )
        assert result.error.code == "CONFLICT"
        assert get_approval(ctx, pending_item.id).data.status == "pending"

    def test_missing_id_is_conflict(self, ctx):
        result = decide_approval(ctx, DecideApprovalRequest(item_id="", decision="approve"))
        assert result.error.code == "CONFLICT"

    def test_unknown_item(self, ctx):
        assert approve(ctx, "ap_nope").error.code == "NOT_FOUND"

    def test_dry_run_changes_nothing(self, ctx, dry_ctx, pending_item):
        result = approve(dry_ctx, pending_item.id)
        assert result.success
        assert result.metadata == {"dry_run": True, "would_decide": "approve"}
        assert get_approval(ctx, pending_item.id).data.status == "pending"
        assert list_grants(ctx).data == []

    def test_dry_run_on_decided_item_conflicts(self, ctx, dry_ctx, pending_item):
        reject(ctx, pending_item.id)

        result = approve(dry_ctx, pending_item.id)

        assert not result.success
        assert result.error.code == "CONFLICT"
        assert get_approval(ctx, pending_item.id).data.status == "rejected"

    def test_dry_run_unknown_decision_conflicts(self, dry_ctx, pending_item):
        result = decide_approval(
            dry_ctx, DecideApprovalRequest(item_id=pending_item.id, decision="maybe"),
        )
        assert result.error.code == "CONFLICT"


class TestGrants:
    def test_list_and_revoke(self, ctx, pending_item):
        approve(ctx, pending_item.id)
        grants = list_grants(ctx).data
        assert len(grants) == 1
        assert grants[0].active is True
        assert grants[0].source_approval_id == pending_item.id

        result = revoke_grant(ctx, pending_item.action_key)
        assert result.success
        assert result.data == {"action_key": pending_item.action_key, "revoked": True}
        assert list_grants(ctx).data == []
        assert len(list_grants(ctx, ListGrantsRequest(active=None)).data) == 1

    def test_revoke_unknown(self, ctx):
        assert revoke_grant(ctx, "home:x:>:1").error.code == "NOT_FOUND"

    def test_revoke_dry_run(self, ctx, dry_ctx, pending_item):
        approve(ctx, pending_item.id)
        result = revoke_grant(dry_ctx, pending_item.action_key)
        assert result.data["dry_run"] is True
        assert len(list_grants(ctx).data) == 1
