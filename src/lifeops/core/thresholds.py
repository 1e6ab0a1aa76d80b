"""
Threshold evaluation.

Compares one :class:`MetricSnapshot` against a rule set and returns the
rules whose predicate holds, in rule order, each paired with the value that
tripped it.  Pure and side-effect free: the caller decides what a hit means.

Semantics:
    - Only enabled rules for the snapshot's domain are considered.
    - A rule whose metric is absent from the snapshot is skipped.
    - Comparison is numeric only.  ``bool`` and non-numeric values never
      match; nothing is coerced (``"40"`` is not ``40``).
    - ``=`` / ``==`` is exact equality, including for floats.
    - No snapshot means no hits.

Examples:
    >>> compare(Operator.LE, 40, 48)
    True
    >>> compare(Operator.EQ, 0.1 + 0.2, 0.3)
    False

Tags:
    thresholds, evaluation, pure-function, lifeops
"""

from __future__ import annotations

import math
import operator as _op
from collections.abc import Callable, Iterable
from numbers import Real
from typing import Any

from lifeops.core.enums import Operator
from lifeops.core.models import MetricSnapshot, ThresholdHit, ThresholdRule

_COMPARATORS: dict[Operator, Callable[[float, float], bool]] = {
    Operator.LT: _op.lt,
    Operator.LE: _op.le,
    Operator.GT: _op.gt,
    Operator.GE: _op.ge,
    Operator.EQ: _op.eq,
    Operator.EQ_ALIAS: _op.eq,
}


def is_numeric(value: Any) -> bool:
    """True for real numbers other than ``bool`` and NaN."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return not math.isnan(value)


def compare(operator: Operator | str, value: Any, threshold: float) -> bool:
    """Evaluate ``value <operator> threshold``; unknown operators never match."""
    try:
        op = Operator(operator)
    except ValueError:
        return False
    if not is_numeric(value):
        return False
    return bool(_COMPARATORS[op](value, threshold))


def evaluate(
    rules: Iterable[ThresholdRule],
    snapshot: MetricSnapshot | None,
) -> list[ThresholdHit]:
    """Return the rules tripped by *snapshot*, in the order given."""
    if snapshot is None:
        return []

    hits: list[ThresholdHit] = []
    for rule in rules:
        if not rule.enabled or rule.domain != snapshot.domain:
            continue
        if rule.metric not in snapshot.metrics:
            continue
        value = snapshot.metrics[rule.metric]
        if compare(rule.operator, value, rule.threshold):
            hits.append(ThresholdHit(rule=rule, value=value))
    return hits


__all__ = ["compare", "evaluate", "is_numeric"]
