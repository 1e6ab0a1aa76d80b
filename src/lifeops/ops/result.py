"""
Operation result envelope.

:class:`OperationResult` is what every ``lifeops.ops`` function hands back to
the CLI and HTTP layers.  It never carries a live exception: failures are
flattened into an :class:`OperationError` with a stable code, and non-fatal
problems (a run record that could not be written, a health read that fell
back to "no data") travel as ``warnings`` next to a successful payload.

Error codes:
    ``VALIDATION_FAILED``  bad input (operator, severity, metrics payload)
    ``NOT_FOUND``          unknown approval item, rule or grant
    ``CONFLICT``           policy violation (already decided, missing ids)
    ``PIPELINE_FAILED``    a pipeline invocation aborted
    ``INTERNAL``           anything else

Unlike :mod:`lifeops.core.result` (``Ok`` / ``Err`` for internal
composition) this module is what crosses the transport boundary.
"""

from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Generic, TypeVar

from lifeops.core.errors import ErrorCategory, LifeOpsError, categorize_error

T = TypeVar("T")

VALIDATION_FAILED = "VALIDATION_FAILED"
NOT_FOUND = "NOT_FOUND"
CONFLICT = "CONFLICT"
PIPELINE_FAILED = "PIPELINE_FAILED"
INTERNAL = "INTERNAL"

_CATEGORY_CODES: dict[ErrorCategory, str] = {
    ErrorCategory.VALIDATION: VALIDATION_FAILED,
    ErrorCategory.NOT_FOUND: NOT_FOUND,
    ErrorCategory.POLICY: CONFLICT,
    ErrorCategory.PIPELINE: PIPELINE_FAILED,
}


def error_code_for(exc: Exception) -> str:
    """Map an exception onto an envelope error code."""
    return _CATEGORY_CODES.get(categorize_error(exc), INTERNAL)


@dataclass(frozen=True, slots=True)
class OperationError:
    """Why an operation failed.

    ``code`` is the stable machine-readable part (see module docstring);
    ``details`` carries the structured context of a :class:`LifeOpsError`.
    """

    code: str
    message: str
    category: ErrorCategory | None = None
    details: dict[str, Any] = field(default_factory=dict)
    retryable: bool = False

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
        }
        if self.details:
            out["details"] = dict(self.details)
        return out


@dataclass
class OperationResult(Generic[T]):
    """Envelope returned by every operation function.

    Build instances with :meth:`ok`, :meth:`fail` or :meth:`from_exception`.
    """

    success: bool
    data: T | None = None
    error: OperationError | None = None
    warnings: list[str] = field(default_factory=list)
    elapsed_ms: float = 0.0
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def ok(
        cls,
        data: T,
        *,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
        metadata: dict[str, Any] | None = None,
    ) -> OperationResult[T]:
        return cls(True, data, None, list(warnings or []), elapsed_ms, dict(metadata or {}))

    @classmethod
    def fail(
        cls,
        code: str,
        message: str,
        *,
        category: ErrorCategory | None = None,
        details: dict[str, Any] | None = None,
        retryable: bool = False,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        error = OperationError(code, message, category, dict(details or {}), retryable)
        return cls(False, None, error, list(warnings or []), elapsed_ms)

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        *,
        code: str | None = None,
        prefix: str = "",
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
    ) -> OperationResult[T]:
        """Build a failure from *exc*, carrying category and context over."""
        if isinstance(exc, LifeOpsError):
            message, details = exc.message, dict(exc.context)
        else:
            message, details = str(exc), {}
        return cls.fail(
            code or error_code_for(exc),
            prefix + message,
            category=categorize_error(exc),
            details=details,
            retryable=bool(getattr(exc, "retryable", False)),
            warnings=warnings,
            elapsed_ms=elapsed_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form for JSON output; empty optional parts are omitted."""
        out: dict[str, Any] = {"success": self.success}
        optional = {
            "data": None if self.data is None else _plain(self.data),
            "error": None if self.error is None else self.error.to_dict(),
            "warnings": self.warnings or None,
            "elapsed_ms": round(self.elapsed_ms, 2) if self.elapsed_ms else None,
            "metadata": self.metadata or None,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


@dataclass
class PagedResult(OperationResult[list[T]]):
    """A page of items plus the total across all pages."""

    total: int = 0
    limit: int = 50
    offset: int = 0
    has_more: bool = False

    @classmethod
    def from_items(
        cls,
        items: list[T],
        total: int,
        *,
        limit: int = 50,
        offset: int = 0,
        warnings: list[str] | None = None,
        elapsed_ms: float = 0.0,
    ) -> PagedResult[T]:
        page = cls.ok(items, warnings=warnings, elapsed_ms=elapsed_ms)
        page.total, page.limit, page.offset = total, limit, offset
        page.has_more = offset + limit < total
        return page

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out.update(total=self.total, limit=self.limit, offset=self.offset, has_more=self.has_more)
        return out


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


class _Timer:
    __slots__ = ("_start",)

    def __init__(self) -> None:
        self._start = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self._start) * 1000


def start_timer() -> _Timer:
    """Stopwatch for an operation; read ``timer.elapsed_ms`` when done."""
    return _Timer()
