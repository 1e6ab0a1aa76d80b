"""
Structured error types for lifeops.

Provides a small hierarchy of typed errors carrying a category, a retry
flag, structured context and an optional chained cause.  Core primitives
raise these; the ``lifeops.ops`` layer converts them into
``OperationResult.fail(...)`` envelopes so transports never see a raw
exception.

Architecture:
    ::

        ┌──────────────────────────────────────────────────────────┐
        │                      LifeOpsError                         │
        │        (category, retryable, context, cause)              │
        ├──────────────────────────────────────────────────────────┤
        │  ConfigError        ValidationError     DatabaseError     │
        │  (CONFIG)           (VALIDATION)        (DATABASE)        │
        │                                                           │
        │  NotFoundError      PolicyViolationError  PipelineError   │
        │  (NOT_FOUND)        (POLICY)              (PIPELINE)      │
        └──────────────────────────────────────────────────────────┘

Guardrails:
    ❌ DON'T: Raise bare Exception for expected failures
    ✅ DO: Pick the subclass whose category matches the failure

    ❌ DON'T: Drop the original exception when wrapping
    ✅ DO: Pass it as ``cause=`` so tracebacks stay intact

Tags:
    error-handling, exception-hierarchy, lifeops, observability
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Categories used for routing, logging and result error codes."""

    DATABASE = "DATABASE"          # Store read/write failures
    VALIDATION = "VALIDATION"      # Bad rule, operator, snapshot payload
    CONFIG = "CONFIG"              # Invalid settings
    NOT_FOUND = "NOT_FOUND"        # Missing approval item, grant, rule
    POLICY = "POLICY"              # Approval policy violations
    PIPELINE = "PIPELINE"          # Pipeline stage failures
    INTERNAL = "INTERNAL"          # Bugs, unexpected state


class LifeOpsError(Exception):
    """Base exception for all lifeops errors.

    Subclasses set ``default_category`` and ``default_retryable``; callers
    may override both per instance.

    Examples:
        >>> err = LifeOpsError("boom")
        >>> err.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> err.with_context(job_name="lifeops_pipeline").context
        {'job_name': 'lifeops_pipeline'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LifeOpsError:
        """Add context to this error (fluent API)."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigError(LifeOpsError):
    """Invalid or missing configuration."""

    default_category = ErrorCategory.CONFIG


class ValidationError(LifeOpsError):
    """Input failed validation (rule definition, snapshot payload, ...)."""

    default_category = ErrorCategory.VALIDATION

    def __init__(self, message: str, *, field: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.field = field
        if field is not None:
            self.context.setdefault("field", field)


class DatabaseError(LifeOpsError):
    """A persistence call against the backing store failed."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


class NotFoundError(LifeOpsError):
    """Requested entity does not exist."""

    default_category = ErrorCategory.NOT_FOUND


class PolicyViolationError(LifeOpsError):
    """An approval-policy rule was violated.

    Raised synchronously, before any state mutation, for example when
    deciding an approval item that has already been decided or when an
    identifier required for a decision is missing.
    """

    default_category = ErrorCategory.POLICY


class PipelineError(LifeOpsError):
    """A pipeline stage failed."""

    default_category = ErrorCategory.PIPELINE


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, LifeOpsError):
        return error.category
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.INTERNAL


__all__ = [
    "ErrorCategory",
    "LifeOpsError",
    "ConfigError",
    "ValidationError",
    "DatabaseError",
    "NotFoundError",
    "PolicyViolationError",
    "PipelineError",
    "categorize_error",
]
