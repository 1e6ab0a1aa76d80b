"""
CLI: ``lifeops rules`` -- threshold rule management.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_result

app = typer.Typer(no_args_is_help=True)


@app.command()
def add(
    domain: str = typer.Argument(..., help="Domain, e.g. work-ops"),
    metric: str = typer.Argument(..., help="Metric name"),
    operator: str = typer.Argument(..., help="<, <=, >, >=, = or =="),
    threshold: float = typer.Argument(..., help="Numeric threshold"),
    severity: str = typer.Option("warning", "--severity", "-s", help="info, warning or critical"),
    disabled: bool = typer.Option(False, "--disabled", help="Create the rule disabled"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Add a rule (or update severity/enabled on an existing one)."""
    from lifeops.ops.requests import UpsertRuleRequest
    from lifeops.ops.rules import upsert_rule

    ctx, _conn = make_context(database, dry_run=dry_run)
    request = UpsertRuleRequest(
        domain=domain,
        metric=metric,
        operator=operator,
        threshold=threshold,
        severity=severity,
        enabled=not disabled,
    )
    output_result(upsert_rule(ctx, request), as_json=json_out, title="Rule")


@app.command("list")
def list_cmd(
    domain: str | None = typer.Option(None, "--domain"),
    enabled_only: bool = typer.Option(False, "--enabled", help="Only enabled rules"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List threshold rules."""
    from lifeops.ops.requests import ListRulesRequest
    from lifeops.ops.rules import list_rules

    ctx, _conn = make_context(database)
    request = ListRulesRequest(domain=domain, enabled=True if enabled_only else None)
    output_result(list_rules(ctx, request), as_json=json_out, title="Rules")


def _set_enabled(rule_id: str, enabled: bool, database: str | None, json_out: bool) -> None:
    from lifeops.ops.requests import SetRuleEnabledRequest
    from lifeops.ops.rules import set_rule_enabled

    ctx, _conn = make_context(database)
    result = set_rule_enabled(ctx, SetRuleEnabledRequest(rule_id=rule_id, enabled=enabled))
    output_result(result, as_json=json_out, title="Rule")


@app.command()
def disable(
    rule_id: str = typer.Argument(..., help="Rule ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Disable a rule."""
    _set_enabled(rule_id, False, database, json_out)


@app.command()
def enable(
    rule_id: str = typer.Argument(..., help="Rule ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Enable a rule."""
    _set_enabled(rule_id, True, database, json_out)
