"""hisaab run-rules: execute due recurring payments (the cron entry point)."""

from __future__ import annotations

from datetime import datetime

import click

from hisaab.core.exceptions import HisaabError

from .common import echo_json, fail, json_option, ledger_option, load_ctx_ledger, resolve_ledger_path


@click.command(name="run-rules")
@ledger_option
@json_option
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Run as of this date instead of the system date (YYYY-MM-DD).",
)
@click.option("--dry-run", is_flag=True, help="List due rules without paying anything.")
@click.pass_context
def run_rules(ctx: click.Context, ledger: str | None, as_json: bool, today: datetime | None, dry_run: bool) -> None:
    """Execute every payment rule that is due and save the ledger."""
    from hisaab.financial.ledger import save_ledger
    from hisaab.financial.rules import RuleExecutor

    path = resolve_ledger_path(ctx, ledger)
    run_date = today.date() if today else None

    try:
        store = load_ctx_ledger(ctx, path)
    except HisaabError as e:
        fail(e)

    executor = RuleExecutor(store)
    if dry_run:
        due = executor.list_due_rules(run_date)
        click.echo(f"{len(due)} rule(s) due")
        for rule in due:
            click.echo(f"  rule {rule.id}: liability {rule.liability_id}, {rule.frequency.value}, {rule.formula_expression}")
        return

    result = executor.execute_due_rules(run_date)
    if result.succeeded:
        save_ledger(store, path)

    if as_json:
        echo_json(result.to_dict())
        return
    click.echo(result.message)
    for error in result.errors:
        click.echo(f"  {error}", err=True)
