"""
Error mapping -- ops error codes to RFC 7807 responses.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from lifeops.api.schemas import ProblemDetail
from lifeops.core.logging import get_logger
from lifeops.ops.result import OperationResult

logger = get_logger(__name__)

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "VALIDATION_FAILED": 400,
    "NOT_FOUND": 404,
    "CONFLICT": 409,
    "PIPELINE_FAILED": 500,
    "INTERNAL": 500,
}


def status_for_error_code(code: str) -> int:
    """Resolve an ops error code to HTTP status, defaulting to 500."""
    return ERROR_CODE_TO_STATUS.get(code, 500)


def problem_response(
    *,
    status: int,
    title: str,
    code: str = "INTERNAL",
    detail: str = "",
    instance: str = "",
    warnings: list[str] | None = None,
) -> JSONResponse:
    body = ProblemDetail(
        title=title,
        status=status,
        code=code,
        detail=detail,
        instance=instance,
        warnings=warnings or [],
    )
    return JSONResponse(status_code=status, content=body.model_dump())


def handle_error(result: OperationResult) -> JSONResponse:
    """Convert a failed ``OperationResult`` into a problem response."""
    code = result.error.code if result.error else "INTERNAL"
    return problem_response(
        status=status_for_error_code(code),
        title=result.error.message if result.error else "Operation failed",
        code=code,
        warnings=result.warnings,
    )


def envelope(result: OperationResult) -> dict[str, Any]:
    """Success envelope for a single payload."""
    return {
        "data": to_plain(result.data),
        "elapsed_ms": round(result.elapsed_ms, 2),
        "warnings": result.warnings,
    }


def to_plain(obj: Any) -> Any:
    if hasattr(obj, "__dataclass_fields__"):
        return asdict(obj)
    if isinstance(obj, list):
        return [to_plain(o) for o in obj]
    return obj


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions -- returns 500 with ProblemDetail."""
    logger.exception("unhandled_api_error", path=request.url.path, error=str(exc))
    return problem_response(
        status=500,
        title="Internal Server Error",
        detail="An unexpected error occurred.",
        instance=str(request.url),
    )
