"""Repositories for the lifeops tables.

Each repository class extends :class:`BaseRepository` and owns every SQL
statement for one table.  Core primitives (evaluator inputs, grant store,
approval queue, run tracker) talk to these classes, never to raw SQL, so
tests can swap a repository for a ``MagicMock`` at the boundary.

Architecture::

    ┌───────────────────────────────────────────────────────────────────┐
    │  core/alerts.py  core/grants.py  core/approvals.py  core/runs.py  │
    └──────────────────────────┬────────────────────────────────────────┘
                               │ uses
                               ▼
    ┌───────────────────────────────────────────────────────────────────┐
    │  SnapshotRepository       -- metric_snapshots                     │
    │  ThresholdRuleRepository  -- threshold_rules                      │
    │  AlertEventRepository     -- alert_events                         │
    │  ApprovalQueueRepository  -- approval_queue                       │
    │  GrantRepository          -- approval_grants                      │
    │  JobRunRepository         -- job_runs                             │
    └──────────────────────────┬────────────────────────────────────────┘
                               │ inherits
                               ▼
                BaseRepository (lifeops.core.repository)

Guardrails:
    ❌ DON'T: Write raw SQL in core primitives or ops modules
    ✅ DO: Add a method here and call it

Tags:
    repository, sql, lifeops, data-access
"""

from __future__ import annotations

from typing import Any

from lifeops.core.repository import BaseRepository
from lifeops.core.schema import TABLES


def _build_where(
    conditions: dict[str, Any],
    *,
    extra_clauses: list[str] | None = None,
) -> tuple[str, tuple]:
    """Build a WHERE clause from a conditions dict.

    Returns ``(where_fragment, params_tuple)``.  Skips ``None`` values.
    ``extra_clauses`` are appended literally (no params).
    """
    parts: list[str] = []
    params: list[Any] = []
    for col, val in conditions.items():
        if val is None:
            continue
        parts.append(f"{col} = ?")
        params.append(val)
    if extra_clauses:
        parts.extend(extra_clauses)
    where = " AND ".join(parts) if parts else "1=1"
    return where, tuple(params)


def _rowcount(cursor: Any) -> int:
    count = getattr(cursor, "rowcount", -1)
    return count if isinstance(count, int) else -1


class _PagedMixin(BaseRepository):
    TABLE = ""
    ORDER_BY = "seq DESC"

    def _paged(
        self, conds: dict[str, Any], limit: int, offset: int
    ) -> tuple[list[dict[str, Any]], int]:
        where, params = _build_where(conds)
        count_row = self.query_one(
            f"SELECT COUNT(*) AS cnt FROM {self.TABLE} WHERE {where}", params,
        )
        total = (count_row or {}).get("cnt", 0)
        rows = self.query(
            f"SELECT * FROM {self.TABLE} WHERE {where} "
            f"ORDER BY {self.ORDER_BY} LIMIT {self.ph(1)} OFFSET {self.ph(1)}",
            (*params, limit, offset),
        )
        return rows, total


# =============================================================================
# metric_snapshots
# =============================================================================


class SnapshotRepository(BaseRepository):
    """Read/append access to ``metric_snapshots``."""

    TABLE = TABLES["snapshots"]

    def create(self, data: dict[str, Any]) -> None:
        self.insert(self.TABLE, data)

    def latest(self, domain: str) -> dict[str, Any] | None:
        """Most recently written snapshot for *domain*, or ``None``.

        Write order (``seq``) decides, not ``captured_at``: a late ingest of an
        older capture is still the one evaluated next.
        """
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE domain = {self.ph(1)} "
            f"ORDER BY seq DESC LIMIT 1",
            (domain,),
        )


# =============================================================================
# threshold_rules
# =============================================================================


class ThresholdRuleRepository(BaseRepository):
    """CRUD for ``threshold_rules``."""

    TABLE = TABLES["rules"]

    def list_rules(
        self,
        *,
        enabled: bool | None = None,
        domain: str | None = None,
    ) -> list[dict[str, Any]]:
        """Rules in a stable order: domain, metric, then creation time."""
        conds: dict[str, Any] = {"domain": domain}
        if enabled is not None:
            conds["enabled"] = 1 if enabled else 0
        where, params = _build_where(conds)
        return self.query(
            f"SELECT * FROM {self.TABLE} WHERE {where} "
            f"ORDER BY domain ASC, metric ASC, created_at ASC, id ASC",
            params,
        )

    def get(self, rule_id: str) -> dict[str, Any] | None:
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE id = {self.ph(1)}", (rule_id,),
        )

    def get_by_key(
        self, domain: str, metric: str, operator: str, threshold: float
    ) -> dict[str, Any] | None:
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE domain = {self.ph(1)} "
            f"AND metric = {self.ph(1)} AND operator = {self.ph(1)} "
            f"AND threshold = {self.ph(1)}",
            (domain, metric, operator, threshold),
        )

    def create(self, data: dict[str, Any]) -> None:
        self.insert(self.TABLE, data)

    def update(self, rule_id: str, updates: dict[str, Any]) -> int:
        if not updates:
            return 0
        sets = ", ".join(f"{k} = {self.ph(1)}" for k in updates)
        cursor = self.execute(
            f"UPDATE {self.TABLE} SET {sets} WHERE id = {self.ph(1)}",
            (*updates.values(), rule_id),
        )
        return _rowcount(cursor)


# =============================================================================
# alert_events
# =============================================================================


class AlertEventRepository(_PagedMixin):
    """Append/list access to ``alert_events``."""

    TABLE = TABLES["alerts"]

    def create(self, data: dict[str, Any]) -> None:
        self.insert(self.TABLE, data)

    def list_alerts(
        self,
        *,
        domain: str | None = None,
        severity: str | None = None,
        source: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """List alerts, newest first.  Returns ``(rows, total)``."""
        return self._paged(
            {"domain": domain, "severity": severity, "source": source}, limit, offset,
        )


# =============================================================================
# approval_queue
# =============================================================================


class ApprovalQueueRepository(_PagedMixin):
    """CRUD for ``approval_queue``."""

    TABLE = TABLES["approvals"]

    def find_pending(self, action_key: str) -> dict[str, Any] | None:
        """Oldest pending item for *action_key*, if any."""
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE action_key = {self.ph(1)} "
            f"AND status = 'pending' ORDER BY seq ASC LIMIT 1",
            (action_key,),
        )

    def create(self, data: dict[str, Any]) -> None:
        self.insert(self.TABLE, data)

    def get(self, item_id: str) -> dict[str, Any] | None:
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE id = {self.ph(1)}", (item_id,),
        )

    def mark_decided(self, item_id: str, status: str, now: str) -> int:
        """Move a *pending* item to *status*.  Returns affected row count.

        The ``status = 'pending'`` guard makes the transition single-shot:
        a second decision on the same item updates nothing.
        """
        cursor = self.execute(
            f"UPDATE {self.TABLE} SET status = {self.ph(1)}, updated_at = {self.ph(1)} "
            f"WHERE id = {self.ph(1)} AND status = 'pending'",
            (status, now, item_id),
        )
        return _rowcount(cursor)

    def list_items(
        self,
        *,
        status: str | None = None,
        domain: str | None = None,
        severity: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[dict[str, Any]], int]:
        """List queue items, newest first.  Returns ``(rows, total)``."""
        return self._paged(
            {"status": status, "domain": domain, "severity": severity}, limit, offset,
        )

    def count_pending(self) -> int:
        row = self.query_one(
            f"SELECT COUNT(*) AS cnt FROM {self.TABLE} WHERE status = 'pending'"
        )
        return (row or {}).get("cnt", 0)


# =============================================================================
# approval_grants
# =============================================================================


class GrantRepository(BaseRepository):
    """Upsert/read access to ``approval_grants``."""

    TABLE = TABLES["grants"]

    def get_active(self, action_key: str) -> dict[str, Any] | None:
        return self.query_one(
            f"SELECT * FROM {self.TABLE} WHERE action_key = {self.ph(1)} AND active = 1",
            (action_key,),
        )

    def upsert_grant(self, data: dict[str, Any]) -> None:
        self.upsert(self.TABLE, data, ["action_key"])

    def deactivate(self, action_key: str, now: str) -> int:
        cursor = self.execute(
            f"UPDATE {self.TABLE} SET active = 0, updated_at = {self.ph(1)} "
            f"WHERE action_key = {self.ph(1)} AND active = 1",
            (now, action_key),
        )
        return _rowcount(cursor)

    def list_grants(self, *, active: bool | None = None) -> list[dict[str, Any]]:
        conds: dict[str, Any] = {}
        if active is not None:
            conds["active"] = 1 if active else 0
        where, params = _build_where(conds)
        return self.query(
            f"SELECT * FROM {self.TABLE} WHERE {where} ORDER BY approved_at DESC",
            params,
        )


# =============================================================================
# job_runs
# =============================================================================


class JobRunRepository(BaseRepository):
    """Append/read access to ``job_runs``."""

    TABLE = TABLES["job_runs"]

    def create(self, data: dict[str, Any]) -> None:
        self.insert(self.TABLE, data)

    def recent(self, job_name: str, limit: int) -> list[dict[str, Any]]:
        """The *limit* most recent runs for *job_name*, newest first."""
        return self.query(
            f"SELECT * FROM {self.TABLE} WHERE job_name = {self.ph(1)} "
            f"ORDER BY finished_at DESC, seq DESC LIMIT {self.ph(1)}",
            (job_name, limit),
        )

    def since(self, job_name: str, since: str) -> list[dict[str, Any]]:
        """Runs finished at or after *since* (ISO), newest first."""
        return self.query(
            f"SELECT * FROM {self.TABLE} WHERE job_name = {self.ph(1)} "
            f"AND finished_at >= {self.ph(1)} ORDER BY finished_at DESC, seq DESC",
            (job_name, since),
        )


__all__ = [
    "SnapshotRepository",
    "ThresholdRuleRepository",
    "AlertEventRepository",
    "ApprovalQueueRepository",
    "GrantRepository",
    "JobRunRepository",
]
