"""
Tables backing the alerting and approval pipeline.

Defines table names and DDL for the six entities the pipeline reads and
writes.  All statements use ``CREATE ... IF NOT EXISTS`` so
:func:`create_tables` is safe to run on every start.

Architecture:
    ::

        TABLES:
        ┌────────────────────────────────────────────────────────────┐
        │ snapshots      → metric_snapshots   (append, latest wins)  │
        │ rules          → threshold_rules    (config, read-only)    │
        │ alerts         → alert_events       (append-only log)      │
        │ approvals      → approval_queue     (pending → decided)    │
        │ grants         → approval_grants    (upsert per key)       │
        │ job_runs       → job_runs           (append-only)          │
        └────────────────────────────────────────────────────────────┘

    ``seq`` columns are insertion-ordered tie-breakers so "most recent"
    stays well defined when two rows share a timestamp.

Guardrails:
    ❌ DON'T: Add a UNIQUE index on pending approval action keys here
    ✅ DO: Keep the dedup in ApprovalQueue.enqueue_if_absent (relaxed,
       see DESIGN.md) so decided items with the same key can coexist

Tags:
    schema, ddl, sqlite, lifeops
"""

from __future__ import annotations

from lifeops.core.protocols import Connection

TABLES = {
    "snapshots": "metric_snapshots",
    "rules": "threshold_rules",
    "alerts": "alert_events",
    "approvals": "approval_queue",
    "grants": "approval_grants",
    "job_runs": "job_runs",
}


DDL = {
    "snapshots": """
        CREATE TABLE IF NOT EXISTS metric_snapshots (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            domain TEXT NOT NULL,           -- e.g. "work-ops", "finance", "home"
            metrics_json TEXT NOT NULL,     -- JSON: {"catering_lead_time_hours": 40}
            source TEXT,
            captured_at TEXT NOT NULL
        )
    """,
    "rules": """
        CREATE TABLE IF NOT EXISTS threshold_rules (
            id TEXT PRIMARY KEY,
            domain TEXT NOT NULL,
            metric TEXT NOT NULL,
            operator TEXT NOT NULL,         -- <, <=, >, >=, =, ==
            threshold REAL NOT NULL,
            severity TEXT NOT NULL,         -- info, warning, critical
            enabled INTEGER NOT NULL DEFAULT 1,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE (domain, metric, operator, threshold)
        )
    """,
    "alerts": """
        CREATE TABLE IF NOT EXISTS alert_events (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            domain TEXT NOT NULL,
            title TEXT NOT NULL,
            severity TEXT NOT NULL,
            source TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """,
    "approvals": """
        CREATE TABLE IF NOT EXISTS approval_queue (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            title TEXT NOT NULL,
            domain TEXT NOT NULL,
            severity TEXT NOT NULL,         -- tier: green, yellow, red
            status TEXT NOT NULL,           -- pending, approved, rejected
            action_key TEXT NOT NULL,
            metadata_json TEXT NOT NULL,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "grants": """
        CREATE TABLE IF NOT EXISTS approval_grants (
            action_key TEXT PRIMARY KEY,
            active INTEGER NOT NULL,
            source_approval_id TEXT,
            approved_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
    """,
    "job_runs": """
        CREATE TABLE IF NOT EXISTS job_runs (
            seq INTEGER PRIMARY KEY AUTOINCREMENT,
            id TEXT NOT NULL UNIQUE,
            job_name TEXT NOT NULL,
            status TEXT NOT NULL,           -- success, failed
            started_at TEXT NOT NULL,
            finished_at TEXT NOT NULL,
            duration_ms INTEGER NOT NULL,
            details_json TEXT
        )
    """,
}

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_snapshots_domain ON metric_snapshots (domain, seq)",
    "CREATE INDEX IF NOT EXISTS idx_rules_enabled ON threshold_rules (enabled)",
    "CREATE INDEX IF NOT EXISTS idx_alerts_created ON alert_events (created_at)",
    "CREATE INDEX IF NOT EXISTS idx_approvals_key_status ON approval_queue (action_key, status)",
    "CREATE INDEX IF NOT EXISTS idx_job_runs_job ON job_runs (job_name, finished_at)",
]


def create_tables(conn: Connection) -> list[str]:
    """Create every lifeops table and index.  Returns the table names."""
    for ddl in DDL.values():
        conn.execute(ddl)
    for idx in INDEXES:
        conn.execute(idx)
    conn.commit()
    return list(TABLES.values())


__all__ = ["TABLES", "DDL", "INDEXES", "create_tables"]
