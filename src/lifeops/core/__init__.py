"""lifeops core -- alerting and approval primitives.

Architecture::

    Layer 1 -- Types & Errors
        errors.py          Structured error hierarchy (LifeOpsError + subclasses)
        result.py          Ok / Err for best-effort secondary writes
        enums.py           Operator, Severity, Tier, ApprovalStatus, RunStatus
        models.py          Row dataclasses + action key builder
        timestamps.py      ULID ids + fixed-width UTC timestamps

    Layer 2 -- Storage
        protocols.py       Connection protocol
        dialect.py         SQLite dialect (placeholders, upsert)
        repository.py      BaseRepository helpers
        repositories.py    One repository per table
        schema.py          DDL + create_tables()

    Layer 3 -- Pipeline primitives
        thresholds.py      Pure threshold evaluation
        alerts.py          Alert rows + action candidates
        grants.py          Reusable approvals (fail-closed reads)
        approvals.py       Human-review inbox with dedup + decisions
        policy.py          Tier table + dispatcher
        runs.py            Run records, health, edge-triggered escalation

    Ambient
        logging.py         structlog configuration
        settings.py        pydantic-settings configuration
"""

from lifeops.core.errors import (
    DatabaseError,
    LifeOpsError,
    NotFoundError,
    PipelineError,
    PolicyViolationError,
    ValidationError,
)
from lifeops.core.result import Err, Ok, Result

__all__ = [
    "LifeOpsError",
    "DatabaseError",
    "NotFoundError",
    "PipelineError",
    "PolicyViolationError",
    "ValidationError",
    "Ok",
    "Err",
    "Result",
]
