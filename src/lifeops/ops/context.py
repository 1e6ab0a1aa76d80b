"""
Request-scoped context for operations.

Every operation function receives an :class:`OperationContext` as its first
argument.  The context carries the database connection, the caller, the
dry-run flag and the pipeline settings an invocation needs.  Each invocation
builds its own context; nothing is shared between invocations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from lifeops.core.protocols import Connection


@dataclass
class OperationContext:
    """Context passed to every operation function.

    Attributes:
        conn: Database connection satisfying :class:`lifeops.core.protocols.Connection`.
        request_id: Unique ID for this invocation (auto-generated).
        caller: Origin of the request: ``"api"``, ``"cli"``, ``"sdk"`` or
            ``"scheduler"``.
        dry_run: When ``True``, operations evaluate without writing.
        job_name: Name under which pipeline runs are recorded.
        pipeline_interval: Expected spacing between scheduled runs.
        health_window: Trailing window used for health summaries.
        metadata: Arbitrary key/value pairs forwarded to logging.
    """

    conn: Connection
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    caller: str = "sdk"
    dry_run: bool = False
    job_name: str = "lifeops_pipeline"
    pipeline_interval: timedelta = timedelta(minutes=30)
    health_window: timedelta = timedelta(hours=24)
    metadata: dict[str, Any] = field(default_factory=dict)
