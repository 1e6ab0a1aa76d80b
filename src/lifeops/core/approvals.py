"""
Approval queue: the human-review inbox.

Items are created ``pending`` by the policy dispatcher and move to
``approved`` or ``rejected`` exactly once.  Approving a ``yellow`` item also
activates a grant for its action key; ``red`` items never produce grants.

Dedup:
    :meth:`ApprovalQueue.enqueue_if_absent` looks for a pending item with the
    same action key before inserting, so a pipeline running every 30 minutes
    does not flood the inbox while a condition stays unresolved.  The check
    and the insert are not mutually exclusive across processes: two
    overlapping invocations can both insert.  Such duplicates are cosmetic,
    since nothing executes from a pending item.

Decisions:
    :meth:`ApprovalQueue.decide` validates before mutating.  Missing ids,
    unknown decisions and already-decided items raise
    :class:`PolicyViolationError` and leave the row untouched.  The status
    update itself is guarded by ``status = 'pending'`` so a racing second
    decision also fails instead of being accepted twice.

Tags:
    approvals, inbox, dedup, idempotency, lifeops
"""

from __future__ import annotations

import json

from lifeops.core.enums import ApprovalStatus, Decision, Tier
from lifeops.core.errors import NotFoundError, PolicyViolationError
from lifeops.core.grants import GrantStore
from lifeops.core.logging import get_logger
from lifeops.core.models import ActionCandidate, ApprovalQueueItem
from lifeops.core.protocols import Connection
from lifeops.core.repositories import ApprovalQueueRepository
from lifeops.core.timestamps import new_id, to_iso8601, utc_now

logger = get_logger(__name__)

_DECISION_STATUS = {
    Decision.APPROVE: ApprovalStatus.APPROVED,
    Decision.REJECT: ApprovalStatus.REJECTED,
}


def approval_title(candidate: ActionCandidate, tier: Tier) -> str:
    return f"[{tier.value.upper()}] {candidate.domain} action gate - {candidate.condition}"


class ApprovalQueue:
    def __init__(
        self,
        conn: Connection,
        *,
        repo: ApprovalQueueRepository | None = None,
        grants: GrantStore | None = None,
    ) -> None:
        self.repo = repo or ApprovalQueueRepository(conn)
        self.grants = grants or GrantStore(conn)

    def enqueue_if_absent(self, candidate: ActionCandidate, tier: Tier) -> bool:
        """Insert a pending item unless one exists for the action key.

        Returns ``True`` when a new item was created, ``False`` on dedup.
        """
        key = candidate.action_key
        try:
            existing = self.repo.find_pending(key)
        except Exception as exc:
            # A duplicate pending item is benign; a lost approval request is not.
            logger.warning("approval_dedup_read_failed", action_key=key, error=str(exc))
            existing = None

        if existing is not None:
            logger.debug("approval_already_pending", action_key=key, item_id=existing["id"])
            return False

        now = to_iso8601(utc_now())
        item_id = new_id("ap")
        metadata = {
            "action_key": key,
            "metric": candidate.metric,
            "value": candidate.value,
            "operator": candidate.operator.value,
            "threshold": candidate.threshold,
            "severity": candidate.severity.value,
            "source": candidate.source,
            "source_event_id": candidate.alert_id,
            "policy": tier.value,
        }
        self.repo.create({
            "id": item_id,
            "title": approval_title(candidate, tier),
            "domain": candidate.domain,
            "severity": tier.value,
            "status": ApprovalStatus.PENDING.value,
            "action_key": key,
            "metadata_json": json.dumps(metadata),
            "created_at": now,
            "updated_at": now,
        })
        logger.info("approval_enqueued", action_key=key, item_id=item_id, tier=tier.value)
        return True

    def get(self, item_id: str) -> ApprovalQueueItem:
        row = self.repo.get(item_id)
        if row is None:
            raise NotFoundError(f"Approval item '{item_id}' not found")
        return ApprovalQueueItem.from_row(row)

    def check_decidable(
        self, item_id: str, decision: Decision | str,
    ) -> tuple[ApprovalQueueItem, Decision]:
        """Validate a decision without recording it.

        Raises the same errors :meth:`decide` would for a missing id, an
        unknown decision, an unknown item or an item that is not pending.
        """
        if not item_id:
            raise PolicyViolationError("An approval item id is required")
        try:
            decision = Decision(decision)
        except ValueError as exc:
            raise PolicyViolationError(
                f"Unknown decision '{decision}'; expected 'approve' or 'reject'",
                cause=exc,
            ) from exc

        item = self.get(item_id)
        if item.status is not ApprovalStatus.PENDING:
            raise PolicyViolationError(
                f"Approval item '{item_id}' was already {item.status.value}",
                context={"item_id": item_id, "status": item.status.value},
            )

        if decision is Decision.APPROVE and item.severity is Tier.YELLOW and not item.action_key:
            raise PolicyViolationError(
                f"Approval item '{item_id}' has no action key to grant",
                context={"item_id": item_id},
            )
        return item, decision

    def decide(self, item_id: str, decision: Decision | str) -> ApprovalQueueItem:
        """Record a terminal decision; approving a yellow item grants its key."""
        item, decision = self.check_decidable(item_id, decision)
        grants_key = decision is Decision.APPROVE and item.severity is Tier.YELLOW

        status = _DECISION_STATUS[decision]
        now = utc_now()
        if self.repo.mark_decided(item_id, status.value, to_iso8601(now)) == 0:
            raise PolicyViolationError(
                f"Approval item '{item_id}' was decided concurrently",
                context={"item_id": item_id},
            )

        if grants_key:
            self.grants.grant(item.action_key, item_id)

        logger.info(
            "approval_decided",
            item_id=item_id,
            decision=decision.value,
            tier=item.severity.value,
            granted=grants_key,
        )
        return ApprovalQueueItem(
            id=item.id,
            title=item.title,
            domain=item.domain,
            severity=item.severity,
            status=status,
            action_key=item.action_key,
            metadata=item.metadata,
            created_at=item.created_at,
            updated_at=now,
        )

    def list_items(
        self,
        *,
        status: ApprovalStatus | None = None,
        domain: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[ApprovalQueueItem], int]:
        rows, total = self.repo.list_items(
            status=status.value if status else None,
            domain=domain,
            limit=limit,
            offset=offset,
        )
        return [ApprovalQueueItem.from_row(r) for r in rows], total


__all__ = ["ApprovalQueue", "approval_title"]
