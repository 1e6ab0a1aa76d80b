"""
Approval policy and dispatcher.

Tier mapping is an ordered rule table evaluated first-match-wins, with a
named default.  It is a pure function of the candidate (no runtime
configuration), so the same candidate always lands in the same tier.

    ┌────┬───────────────────────────────────────────────────┬────────┐
    │ #  │ match                                             │ tier   │
    ├────┼───────────────────────────────────────────────────┼────────┤
    │ 1  │ domain == finance                                 │ red    │
    │ 2  │ domain == work-ops and metric == catering_lead... │ yellow │
    │ 3  │ domain == home and severity == info               │ green  │
    │ -  │ default: critical → red, anything else → yellow   │        │
    └────┴───────────────────────────────────────────────────┴────────┘

Dispatch per tier:
    green   execute now (alert tagged ``auto-executed/green``)
    yellow  grant present → execute (``auto-executed/yellow-approved-once``)
            otherwise enqueue for approval and count as blocked
    red     always enqueue and count as blocked; grants are never consulted

Every candidate increments exactly one of ``auto_executed`` / ``blocked``.

Tags:
    policy, dispatch, approval-tiers, lifeops
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import asdict, dataclass

from lifeops.core.alerts import AlertWriter
from lifeops.core.approvals import ApprovalQueue
from lifeops.core.enums import Severity, Tier
from lifeops.core.grants import GrantStore
from lifeops.core.logging import get_logger
from lifeops.core.models import ActionCandidate
from lifeops.core.protocols import Connection
from lifeops.core.repositories import AlertEventRepository

logger = get_logger(__name__)

FINANCE = "finance"
WORK_OPS = "work-ops"
HOME = "home"

SOURCE_POLICY_DISPATCH = "policy_dispatch"


@dataclass(frozen=True, slots=True)
class PolicyRule:
    name: str
    matches: Callable[[ActionCandidate], bool]
    tier: Tier


POLICY_RULES: tuple[PolicyRule, ...] = (
    PolicyRule(
        name="finance_always_gated",
        matches=lambda c: c.domain == FINANCE,
        tier=Tier.RED,
    ),
    PolicyRule(
        name="catering_lead_time_approve_once",
        matches=lambda c: c.domain == WORK_OPS and c.metric == "catering_lead_time_hours",
        tier=Tier.YELLOW,
    ),
    PolicyRule(
        name="home_info_auto",
        matches=lambda c: c.domain == HOME and c.severity is Severity.INFO,
        tier=Tier.GREEN,
    ),
)


def default_tier(candidate: ActionCandidate) -> Tier:
    """Fallback when no rule matches: critical → red, else yellow."""
    return Tier.RED if candidate.severity is Severity.CRITICAL else Tier.YELLOW


def match_policy(candidate: ActionCandidate) -> tuple[str, Tier]:
    """Return ``(rule_name, tier)`` for the first matching rule."""
    for rule in POLICY_RULES:
        if rule.matches(candidate):
            return rule.name, rule.tier
    return "default", default_tier(candidate)


def tier_for(candidate: ActionCandidate) -> Tier:
    return match_policy(candidate)[1]


@dataclass(slots=True)
class DispatchCounters:
    auto_executed: int = 0
    approval_queued: int = 0
    blocked: int = 0
    grants_used: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)


class PolicyDispatcher:
    """Route candidates through the approval policy.

    Holds no state between calls; all coordination goes through the store.
    Store errors on the primary path (auto-action alert writes, approval
    inserts) propagate to the caller.
    """

    def __init__(
        self,
        conn: Connection,
        *,
        grants: GrantStore | None = None,
        queue: ApprovalQueue | None = None,
        writer: AlertWriter | None = None,
    ) -> None:
        self.grants = grants or GrantStore(conn)
        self.queue = queue or ApprovalQueue(conn, grants=self.grants)
        self.writer = writer or AlertWriter(AlertEventRepository(conn))

    def dispatch(self, candidates: Iterable[ActionCandidate]) -> DispatchCounters:
        counters = DispatchCounters()
        for candidate in candidates:
            rule_name, tier = match_policy(candidate)
            log = logger.bind(action_key=candidate.action_key, tier=tier.value, rule=rule_name)

            if tier is Tier.GREEN:
                self._execute(candidate, "green")
                counters.auto_executed += 1
                log.info("candidate_auto_executed")
                continue

            if tier is Tier.YELLOW and self.grants.is_granted(candidate.action_key):
                self._execute(candidate, "yellow-approved-once")
                counters.auto_executed += 1
                counters.grants_used += 1
                log.info("candidate_auto_executed", grant_used=True)
                continue

            if self.queue.enqueue_if_absent(candidate, tier):
                counters.approval_queued += 1
            counters.blocked += 1
            log.info("candidate_blocked")

        return counters

    def _execute(self, candidate: ActionCandidate, reason: str) -> None:
        self.writer.write(
            domain=candidate.domain,
            title=f"AUTO ACTION ({reason}) - {candidate.condition}",
            severity=candidate.severity.value,
            source=SOURCE_POLICY_DISPATCH,
            prefix="act",
        )


__all__ = [
    "POLICY_RULES",
    "PolicyRule",
    "PolicyDispatcher",
    "DispatchCounters",
    "default_tier",
    "match_policy",
    "tier_for",
]
