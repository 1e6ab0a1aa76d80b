"""
Job run tracker and health monitor.

Every pipeline invocation that finishes (successfully or not) appends one
``job_runs`` row.  Those rows drive two things:

- **Escalation.**  When a run fails, the three most recent runs decide
  whether to raise a critical alert.  It fires only on the transition into
  two consecutive failures::

      newest → oldest           escalate?
      [failed, failed, success] yes (edge)
      [failed, failed]          yes (edge, no history before)
      [failed, failed, failed]  no  (outage already escalated)
      [failed, success, ...]    no

- **Health.**  A rolling window summary (success rate, average duration,
  current failure streak) for status displays.

Both are secondary concerns.  :meth:`JobRunTracker.record` and
:meth:`JobRunTracker.check_escalation` never raise; they return ``Err`` so
the caller can surface a warning without masking the pipeline outcome.
:meth:`JobRunTracker.health` fails open: a read error yields an empty
summary carrying the error as a warning.

Tags:
    job-runs, health, escalation, edge-trigger, lifeops
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from lifeops.core.alerts import AlertWriter
from lifeops.core.enums import RunStatus, Severity
from lifeops.core.logging import get_logger
from lifeops.core.models import JobRun
from lifeops.core.protocols import Connection
from lifeops.core.repositories import AlertEventRepository, JobRunRepository
from lifeops.core.result import Err, Ok, Result
from lifeops.core.timestamps import new_id, to_iso8601, utc_now

logger = get_logger(__name__)

SOURCE_JOB_MONITOR = "job_monitor"
ESCALATION_DOMAIN = "system"


@dataclass(slots=True)
class JobHealth:
    """Rolling health summary for one job.

    With no runs in the window every statistic is ``None`` and ``total`` is 0.
    """

    job_name: str
    total: int = 0
    successes: int | None = None
    failures: int | None = None
    success_rate: float | None = None
    avg_duration_ms: int | None = None
    consecutive_failures: int | None = None
    last_run: JobRun | None = None
    warnings: list[str] = field(default_factory=list)


def compute_health(job_name: str, runs: Sequence[JobRun]) -> JobHealth:
    """Summarize *runs* (newest first)."""
    if not runs:
        return JobHealth(job_name=job_name)

    total = len(runs)
    failures = sum(1 for r in runs if r.status is RunStatus.FAILED)
    successes = total - failures

    streak = 0
    for run in runs:
        if run.status is not RunStatus.FAILED:
            break
        streak += 1

    return JobHealth(
        job_name=job_name,
        total=total,
        successes=successes,
        failures=failures,
        success_rate=round(successes / total * 100, 1),
        avg_duration_ms=round(sum(r.duration_ms for r in runs) / total),
        consecutive_failures=streak,
        last_run=runs[0],
    )


def should_escalate(statuses: Sequence[RunStatus]) -> bool:
    """Edge trigger over the newest-first statuses of the latest runs."""
    if len(statuses) < 2:
        return False
    if statuses[0] is not RunStatus.FAILED or statuses[1] is not RunStatus.FAILED:
        return False
    return len(statuses) < 3 or statuses[2] is not RunStatus.FAILED


def next_due_at(last_run: JobRun | None, interval: timedelta) -> datetime | None:
    """Advisory next execution time; ``None`` before the first run."""
    if last_run is None:
        return None
    return last_run.finished_at + interval


class JobRunTracker:
    def __init__(
        self,
        conn: Connection,
        *,
        repo: JobRunRepository | None = None,
        writer: AlertWriter | None = None,
    ) -> None:
        self.repo = repo or JobRunRepository(conn)
        self.writer = writer or AlertWriter(AlertEventRepository(conn))

    def record(
        self,
        job_name: str,
        status: RunStatus,
        started_at: datetime,
        finished_at: datetime,
        details: dict[str, Any] | None = None,
    ) -> Result[JobRun]:
        """Append a run row; storage errors come back as ``Err``."""
        try:
            duration_ms = max(0, int((finished_at - started_at).total_seconds() * 1000))
            run = JobRun(
                id=new_id("run"),
                job_name=job_name,
                status=RunStatus(status),
                started_at=started_at,
                finished_at=finished_at,
                duration_ms=duration_ms,
                details=dict(details or {}),
            )
            self.repo.create({
                "id": run.id,
                "job_name": run.job_name,
                "status": run.status.value,
                "started_at": to_iso8601(run.started_at),
                "finished_at": to_iso8601(run.finished_at),
                "duration_ms": run.duration_ms,
                "details_json": json.dumps(run.details, default=str),
            })
        except Exception as exc:
            logger.warning("job_run_record_failed", job_name=job_name, error=str(exc))
            return Err(exc)
        logger.info("job_run_recorded", job_name=job_name, status=run.status.value, run_id=run.id)
        return Ok(run)

    def check_escalation(self, job_name: str) -> Result[bool]:
        """Raise a critical alert on the transition into two straight failures.

        Returns ``Ok(True)`` when an alert was written.
        """
        try:
            rows = self.repo.recent(job_name, 3)
            statuses = [RunStatus(r["status"]) for r in rows]
            if not should_escalate(statuses):
                return Ok(False)
            self.writer.write(
                domain=ESCALATION_DOMAIN,
                title=f"Job '{job_name}' failed 2 consecutive runs",
                severity=Severity.CRITICAL.value,
                source=SOURCE_JOB_MONITOR,
                prefix="esc",
            )
        except Exception as exc:
            logger.warning("escalation_check_failed", job_name=job_name, error=str(exc))
            return Err(exc)
        logger.error("job_escalated", job_name=job_name, consecutive_failures=2)
        return Ok(True)

    def health(self, job_name: str, window: timedelta) -> JobHealth:
        since = to_iso8601(utc_now() - window)
        try:
            runs = [JobRun.from_row(r) for r in self.repo.since(job_name, since)]
        except Exception as exc:
            logger.warning("job_health_read_failed", job_name=job_name, error=str(exc))
            return JobHealth(job_name=job_name, warnings=[f"health unavailable: {exc}"])
        return compute_health(job_name, runs)

    def last_run(self, job_name: str) -> JobRun | None:
        rows = self.repo.recent(job_name, 1)
        return JobRun.from_row(rows[0]) if rows else None


__all__ = [
    "SOURCE_JOB_MONITOR",
    "JobHealth",
    "JobRunTracker",
    "compute_health",
    "next_due_at",
    "should_escalate",
]
