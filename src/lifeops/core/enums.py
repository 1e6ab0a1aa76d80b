"""
Enumerations used across lifeops.

String enums so values round-trip through the store and JSON unchanged.
"""

from __future__ import annotations

from enum import Enum


class Operator(str, Enum):
    """Threshold comparison operator.  ``==`` is accepted as an alias of ``=``."""

    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="
    EQ = "="
    EQ_ALIAS = "=="


class Severity(str, Enum):
    """Severity of a threshold rule / alert event."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class Tier(str, Enum):
    """Approval tier assigned by the policy dispatcher."""

    GREEN = "green"    # auto-execute
    YELLOW = "yellow"  # approve once, then reusable grant
    RED = "red"        # always requires approval


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class Decision(str, Enum):
    """Human decision recorded against an approval item."""

    APPROVE = "approve"
    REJECT = "reject"


class RunStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


__all__ = ["Operator", "Severity", "Tier", "ApprovalStatus", "Decision", "RunStatus"]
