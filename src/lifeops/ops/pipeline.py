"""
Pipeline operations: the trigger surface.

``generate_alerts``      evaluate + write alerts, no dispatch
``run_pipeline``         generate → dispatch → record run (+ escalation)
``get_pipeline_status``  health window, last run, next due time, inbox size

Each invocation is a short-lived unit on its own connection.  Stages are
committed as they finish, so a crash after generation keeps its alert rows.
When a stage fails the open transaction is rolled back, a ``failed`` run is
recorded and escalation is checked; both are best-effort and their own
failures only add warnings to the ``PIPELINE_FAILED`` envelope.  A dry run
that fails records nothing.
"""

from __future__ import annotations

from datetime import datetime

from lifeops.core.alerts import AlertGenerator, GenerationResult
from lifeops.core.enums import RunStatus
from lifeops.core.errors import PipelineError
from lifeops.core.logging import LogContext, get_logger
from lifeops.core.models import ActionCandidate, JobRun
from lifeops.core.policy import PolicyDispatcher, tier_for
from lifeops.core.repositories import ApprovalQueueRepository
from lifeops.core.runs import JobHealth, JobRunTracker, next_due_at
from lifeops.core.timestamps import to_iso8601, utc_now
from lifeops.ops.context import OperationContext
from lifeops.ops.responses import (
    CandidateSummary,
    GenerationReport,
    JobHealthSummary,
    PipelineRunResult,
    PipelineStatus,
    RuleFailureSummary,
    RunSummary,
)
from lifeops.ops.result import OperationResult, start_timer

logger = get_logger(__name__)


def generate_alerts(ctx: OperationContext) -> OperationResult[GenerationReport]:
    """Evaluate thresholds and persist alerts without dispatching."""
    timer = start_timer()

    try:
        generation = AlertGenerator(ctx.conn).generate(dry_run=ctx.dry_run)
        if not ctx.dry_run:
            ctx.conn.commit()
    except Exception as exc:
        _rollback(ctx)
        logger.exception("op_failed", op="generate_alerts", error=str(exc))
        return OperationResult.from_exception(
            exc, prefix="Alert generation failed: ", elapsed_ms=timer.elapsed_ms,
        )

    return OperationResult.ok(
        GenerationReport(
            created=generation.created,
            candidates=[_summarize_candidate(c) for c in generation.candidates],
            metrics=generation.metrics,
            failures=_summarize_failures(generation),
            dry_run=ctx.dry_run,
        ),
        warnings=_failure_warnings(generation),
        elapsed_ms=timer.elapsed_ms,
    )


def run_pipeline(ctx: OperationContext) -> OperationResult[PipelineRunResult]:
    """Generate candidates, dispatch them through the policy, record the run."""
    timer = start_timer()
    started_at = utc_now()
    tracker = JobRunTracker(ctx.conn)
    stage = "generate"

    with LogContext(job_name=ctx.job_name, request_id=ctx.request_id):
        logger.info("pipeline_started", dry_run=ctx.dry_run, caller=ctx.caller)
        try:
            generation = AlertGenerator(ctx.conn).generate(dry_run=ctx.dry_run)
            if ctx.dry_run:
                return OperationResult.ok(
                    PipelineRunResult(
                        job_name=ctx.job_name,
                        status="dry_run",
                        candidates=[_summarize_candidate(c) for c in generation.candidates],
                        dry_run=True,
                    ),
                    elapsed_ms=timer.elapsed_ms,
                )
            ctx.conn.commit()

            stage = "dispatch"
            counters = PolicyDispatcher(ctx.conn).dispatch(generation.candidates)
            ctx.conn.commit()
        except Exception as exc:
            _rollback(ctx)
            logger.exception("pipeline_failed", stage=stage, error=str(exc), dry_run=ctx.dry_run)
            # Dry runs leave no run record and never escalate.
            warnings = [] if ctx.dry_run else _record_failure(ctx, tracker, started_at, stage, exc)
            error = PipelineError(
                f"Pipeline run failed during {stage}: {exc}",
                context={"job_name": ctx.job_name, "stage": stage},
                cause=exc,
            )
            return OperationResult.from_exception(
                error, warnings=warnings, elapsed_ms=timer.elapsed_ms,
            )

        warnings = _failure_warnings(generation)
        finished_at = utc_now()
        details = {"generated": generation.created, **counters.to_dict()}
        recorded = tracker.record(ctx.job_name, RunStatus.SUCCESS, started_at, finished_at, details)
        run: JobRun | None = None
        if recorded.is_err():
            warnings.append(f"run record not written: {recorded.message}")
        else:
            run = recorded.unwrap()
            _commit_secondary(ctx, warnings)

        logger.info(
            "pipeline_completed",
            generated=generation.created,
            **counters.to_dict(),
            warnings=len(warnings),
        )
        return OperationResult.ok(
            PipelineRunResult(
                job_name=ctx.job_name,
                status=RunStatus.SUCCESS.value,
                run_id=run.id if run else None,
                generated=generation.created,
                candidates=[_summarize_candidate(c) for c in generation.candidates],
                failures=_summarize_failures(generation),
                auto_executed=counters.auto_executed,
                approval_queued=counters.approval_queued,
                blocked=counters.blocked,
                grants_used=counters.grants_used,
                duration_ms=run.duration_ms if run else _elapsed_ms(started_at, finished_at),
            ),
            warnings=warnings,
            elapsed_ms=timer.elapsed_ms,
        )


def get_pipeline_status(ctx: OperationContext) -> OperationResult[PipelineStatus]:
    """Health for the trailing window, last run, next due time, pending approvals."""
    timer = start_timer()
    warnings: list[str] = []

    try:
        tracker = JobRunTracker(ctx.conn)
        health = tracker.health(ctx.job_name, ctx.health_window)
        warnings.extend(health.warnings)

        last_run = health.last_run
        try:
            last_run = tracker.last_run(ctx.job_name)
        except Exception as exc:
            logger.warning("last_run_read_failed", job_name=ctx.job_name, error=str(exc))
            warnings.append(f"last run unavailable: {exc}")

        pending: int | None = None
        try:
            pending = ApprovalQueueRepository(ctx.conn).count_pending()
        except Exception as exc:
            logger.warning("pending_count_failed", error=str(exc))
            warnings.append(f"pending approvals unavailable: {exc}")

        due = next_due_at(last_run, ctx.pipeline_interval)
        status = PipelineStatus(
            job_name=ctx.job_name,
            health=_summarize_health(health, ctx),
            last_run=_summarize_run(last_run) if last_run else None,
            next_due_at=to_iso8601(due),
            overdue=due is not None and utc_now() > due,
            pending_approvals=pending,
        )
        return OperationResult.ok(status, warnings=warnings, elapsed_ms=timer.elapsed_ms)
    except Exception as exc:
        logger.exception("op_failed", op="get_pipeline_status", error=str(exc))
        return OperationResult.fail(
            "INTERNAL",
            f"Failed to read pipeline status: {exc}",
            warnings=warnings,
            elapsed_ms=timer.elapsed_ms,
        )


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _record_failure(
    ctx: OperationContext,
    tracker: JobRunTracker,
    started_at: datetime,
    stage: str,
    exc: Exception,
) -> list[str]:
    """Write the failed run and check escalation; returns warnings."""
    warnings: list[str] = []
    recorded = tracker.record(
        ctx.job_name,
        RunStatus.FAILED,
        started_at,
        utc_now(),
        {"stage": stage, "error": str(exc)},
    )
    if recorded.is_err():
        # Without this run the history is stale; escalating on it could misfire.
        warnings.append(f"run record not written: {recorded.message}")
        return warnings

    escalation = tracker.check_escalation(ctx.job_name)
    if escalation.is_err():
        warnings.append(f"escalation check failed: {escalation.message}")
    _commit_secondary(ctx, warnings)
    return warnings


def _commit_secondary(ctx: OperationContext, warnings: list[str]) -> None:
    try:
        ctx.conn.commit()
    except Exception as exc:
        logger.warning("secondary_commit_failed", error=str(exc))
        warnings.append(f"run bookkeeping not committed: {exc}")


def _rollback(ctx: OperationContext) -> None:
    try:
        ctx.conn.rollback()
    except Exception as exc:
        logger.warning("rollback_failed", error=str(exc))


def _elapsed_ms(started_at: datetime, finished_at: datetime) -> int:
    return max(0, int((finished_at - started_at).total_seconds() * 1000))


def _summarize_candidate(c: ActionCandidate) -> CandidateSummary:
    return CandidateSummary(
        action_key=c.action_key,
        domain=c.domain,
        metric=c.metric,
        value=c.value,
        operator=c.operator.value,
        threshold=c.threshold,
        severity=c.severity.value,
        tier=tier_for(c).value,
        source=c.source,
        alert_id=c.alert_id,
    )


def _summarize_failures(generation: GenerationResult) -> list[RuleFailureSummary]:
    return [
        RuleFailureSummary(rule_id=f.rule_id, action_key=f.action_key, error=f.error)
        for f in generation.failures
    ]


def _failure_warnings(generation: GenerationResult) -> list[str]:
    return [f"alert not written for {f.action_key}: {f.error}" for f in generation.failures]


def _summarize_run(run: JobRun) -> RunSummary:
    return RunSummary(
        id=run.id,
        status=run.status.value,
        started_at=to_iso8601(run.started_at),
        finished_at=to_iso8601(run.finished_at),
        duration_ms=run.duration_ms,
    )


def _summarize_health(health: JobHealth, ctx: OperationContext) -> JobHealthSummary:
    return JobHealthSummary(
        window_hours=ctx.health_window.total_seconds() / 3600,
        total=health.total,
        successes=health.successes,
        failures=health.failures,
        success_rate=health.success_rate,
        avg_duration_ms=health.avg_duration_ms,
        consecutive_failures=health.consecutive_failures,
    )
