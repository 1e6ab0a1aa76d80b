"""
Grant store: reusable approvals keyed by action key.

A grant is created when a human approves a ``yellow`` approval item and
lets every later candidate with the same action key execute unattended
until the grant is revoked.  Grants are monotonic booleans written with an
idempotent upsert, so concurrent writers are simply last-writer-wins.

Reads fail closed: if the store cannot answer, the action is treated as
not granted.

Tags:
    grants, allow-list, fail-closed, lifeops
"""

from __future__ import annotations

from lifeops.core.errors import NotFoundError, PolicyViolationError
from lifeops.core.logging import get_logger
from lifeops.core.models import ApprovalGrant
from lifeops.core.protocols import Connection
from lifeops.core.repositories import GrantRepository
from lifeops.core.timestamps import to_iso8601, utc_now

logger = get_logger(__name__)


class GrantStore:
    def __init__(self, conn: Connection, *, repo: GrantRepository | None = None) -> None:
        self.repo = repo or GrantRepository(conn)

    def is_granted(self, action_key: str) -> bool:
        """True iff an active grant exists; any read error counts as ``False``."""
        try:
            return self.repo.get_active(action_key) is not None
        except Exception as exc:
            logger.warning("grant_read_failed", action_key=action_key, error=str(exc))
            return False

    def grant(self, action_key: str, source_approval_id: str) -> ApprovalGrant:
        """Activate (or re-activate) the grant for *action_key*."""
        if not action_key or not source_approval_id:
            raise PolicyViolationError(
                "Granting requires both an action key and a source approval id",
                context={"action_key": action_key, "source_approval_id": source_approval_id},
            )
        approved_at = utc_now()
        now = to_iso8601(approved_at)
        self.repo.upsert_grant({
            "action_key": action_key,
            "active": 1,
            "source_approval_id": source_approval_id,
            "approved_at": now,
            "updated_at": now,
        })
        logger.info("grant_activated", action_key=action_key, source_approval_id=source_approval_id)
        return ApprovalGrant(
            action_key=action_key,
            active=True,
            source_approval_id=source_approval_id,
            approved_at=approved_at,
        )

    def revoke(self, action_key: str) -> None:
        """Deactivate an active grant; raises :class:`NotFoundError` if none."""
        if self.repo.deactivate(action_key, to_iso8601(utc_now())) == 0:
            raise NotFoundError(f"No active grant for '{action_key}'")
        logger.info("grant_revoked", action_key=action_key)

    def list_grants(self, *, active: bool | None = None) -> list[ApprovalGrant]:
        return [ApprovalGrant.from_row(r) for r in self.repo.list_grants(active=active)]


__all__ = ["GrantStore"]
