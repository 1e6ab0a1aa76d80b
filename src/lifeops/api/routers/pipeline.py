"""
Pipeline router -- the HTTP trigger surface.

Endpoints:
    POST /pipeline/generate   Evaluate thresholds and write alerts
    POST /pipeline/run        Generate, dispatch and record one run
    GET  /pipeline/status     Health window, last run, next due time

All three accept ``?dry_run=true``.  A failed run answers 500 with code
``PIPELINE_FAILED``; best-effort bookkeeping problems appear in
``warnings`` on either outcome.
"""

from __future__ import annotations

from fastapi import APIRouter

from lifeops.api.deps import OpContext
from lifeops.api.errors import envelope, handle_error

router = APIRouter(prefix="/pipeline")


@router.post("/generate")
def generate(ctx: OpContext):
    """Evaluate enabled rules against the latest snapshots and write alerts."""
    from lifeops.ops.pipeline import generate_alerts

    result = generate_alerts(ctx)
    if not result.success:
        return handle_error(result)
    return envelope(result)


@router.post("/run")
def run(ctx: OpContext):
    """Run the pipeline once.  Intended as a scheduler target."""
    from lifeops.ops.pipeline import run_pipeline

    ctx.caller = "scheduler"
    result = run_pipeline(ctx)
    if not result.success:
        return handle_error(result)
    return envelope(result)


@router.get("/status")
def status(ctx: OpContext):
    """Rolling health, last run, next due time and pending approval count."""
    from lifeops.ops.pipeline import get_pipeline_status

    result = get_pipeline_status(ctx)
    if not result.success:
        return handle_error(result)
    return envelope(result)
