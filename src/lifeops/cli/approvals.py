"""
CLI: ``lifeops approvals`` and ``lifeops grants`` -- the human-review side.
"""

from __future__ import annotations

import typer

from lifeops.cli.utils import make_context, output_paged, output_result

app = typer.Typer(no_args_is_help=True)
grants_app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_cmd(
    status: str | None = typer.Option("pending", "--status", "-s", help="pending, approved or rejected"),
    all_statuses: bool = typer.Option(False, "--all", help="Ignore --status"),
    domain: str | None = typer.Option(None, "--domain"),
    limit: int = typer.Option(50, "--limit", "-n"),
    offset: int = typer.Option(0, "--offset"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List approval items (pending by default)."""
    from lifeops.ops.approvals import list_approvals
    from lifeops.ops.requests import ListApprovalsRequest

    ctx, _conn = make_context(database)
    request = ListApprovalsRequest(
        status=None if all_statuses else status,
        domain=domain,
        limit=limit,
        offset=offset,
    )
    output_paged(list_approvals(ctx, request), as_json=json_out, title="Approvals")


@app.command()
def show(
    item_id: str = typer.Argument(..., help="Approval item ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Show one approval item."""
    from lifeops.ops.approvals import get_approval

    ctx, _conn = make_context(database)
    output_result(get_approval(ctx, item_id), as_json=json_out, title="Approval")


@app.command()
def approve(
    item_id: str = typer.Argument(..., help="Approval item ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Approve an item.  Yellow items also grant their action key."""
    from lifeops.ops.approvals import approve as approve_op

    ctx, _conn = make_context(database, dry_run=dry_run)
    output_result(approve_op(ctx, item_id), as_json=json_out, title="Approved")


@app.command()
def reject(
    item_id: str = typer.Argument(..., help="Approval item ID"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Reject an item."""
    from lifeops.ops.approvals import reject as reject_op

    ctx, _conn = make_context(database, dry_run=dry_run)
    output_result(reject_op(ctx, item_id), as_json=json_out, title="Rejected")


@grants_app.command("list")
def list_grants_cmd(
    all_grants: bool = typer.Option(False, "--all", help="Include revoked grants"),
    database: str | None = typer.Option(None, "--database", "-d"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List grants (active only by default)."""
    from lifeops.ops.approvals import list_grants
    from lifeops.ops.requests import ListGrantsRequest

    ctx, _conn = make_context(database)
    request = ListGrantsRequest(active=None if all_grants else True)
    output_result(list_grants(ctx, request), as_json=json_out, title="Grants")


@grants_app.command()
def revoke(
    action_key: str = typer.Argument(..., help="Action key, e.g. work-ops:catering_lead_time_hours:<=:48"),
    database: str | None = typer.Option(None, "--database", "-d"),
    dry_run: bool = typer.Option(False, "--dry-run"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Revoke a grant; matching candidates will queue for approval again."""
    from lifeops.ops.approvals import revoke_grant

    ctx, _conn = make_context(database, dry_run=dry_run)
    output_result(revoke_grant(ctx, action_key), as_json=json_out, title="Grant Revoked")
