"""
lifeops - operational alerting and policy-gated action dispatch.

Threshold rules are evaluated against the latest metric snapshots, violations
become alert events and action candidates, and each candidate is routed through
a three-tier approval policy (green / yellow / red).  Every pipeline invocation
is recorded as a job run so that sustained failure can be escalated.

Layers:
- lifeops.core: primitives (evaluator, generator, grants, approvals, policy, runs)
- lifeops.ops: transport-agnostic operations returning ``OperationResult``
- lifeops.cli / lifeops.api: Typer and FastAPI transports
"""

__version__ = "0.1.0"
