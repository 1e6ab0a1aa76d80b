"""
Result type for best-effort work.

``Ok`` / ``Err`` make fallible steps explicit.  lifeops uses them for the
secondary writes of a pipeline invocation (run records, escalation alerts):
those steps must never mask the primary outcome, so instead of raising
they hand back an ``Err`` that the caller turns into an envelope warning.

Examples:
    >>> res = try_result(lambda: 1 / 0)
    >>> res.is_err()
    True
    >>> res.unwrap_or(0)
    0
    >>> Ok(3).map(lambda x: x * 2)
    Ok(6)

Tags:
    result, error-handling, best-effort, lifeops
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Ok[U]:
        return Ok(f(self.value))

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing the exception that caused it."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, f: Callable[[T], U]) -> Err[U]:
        return Err(self.error)

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"

    def to_dict(self) -> dict[str, Any]:
        return {"ok": False, "error": self.message}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def try_result(f: Callable[[], T]) -> Result[T]:
    """Run *f* and capture its outcome as ``Ok`` or ``Err``."""
    try:
        return Ok(f())
    except Exception as exc:
        return Err(exc)


__all__ = ["Ok", "Err", "Result", "try_result"]
