"""hisaab profit / dividends / liability: read-only reports."""

from __future__ import annotations

from datetime import datetime

import click

from hisaab.core.exceptions import HisaabError

from .common import echo_json, echo_rows, fail, json_option, ledger_option, load_ctx_ledger

_TODAY_OPTION = click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Pin the current date for year-to-date figures (YYYY-MM-DD).",
)


def _as_date(value: datetime | None):
    return value.date() if value else None


@click.command()
@click.argument("asset_id", type=int)
@ledger_option
@json_option
@click.pass_context
def profit(ctx: click.Context, asset_id: int, ledger: str | None, as_json: bool) -> None:
    """Show position, cost basis and gains for an asset."""
    from hisaab.financial.portfolio import asset_profit

    try:
        result = asset_profit(load_ctx_ledger(ctx, ledger), asset_id)
    except HisaabError as e:
        fail(e)

    if as_json:
        echo_json(result.to_dict())
        return
    if not result.has_transactions:
        click.echo("No transactions recorded.")
    echo_rows(
        [
            ("Shares", f"{result.total_shares:f}"),
            ("Avg cost basis", f"{result.avg_cost_basis:,.4f}"),
            ("Current price", f"{result.current_price:,.4f}"),
            ("Current value", f"{result.current_value:,.2f}"),
            ("Remaining cost", f"{result.total_cost:,.2f}"),
            ("Unrealized gain", f"{result.unrealized_gain:,.2f}"),
            ("Realized gain", f"{result.realized_gain:,.2f}"),
            ("Dividend income", f"{result.dividend_income:,.2f}"),
            ("Total gain", f"{result.total_gain:,.2f}"),
            ("Gain %", f"{result.gain_percentage:,.2f}%"),
        ]
    )


@click.command()
@click.argument("asset_id", type=int)
@ledger_option
@json_option
@_TODAY_OPTION
@click.pass_context
def dividends(ctx: click.Context, asset_id: int, ledger: str | None, as_json: bool, today: datetime | None) -> None:
    """Show dividend totals, yield and eligible payouts for an asset."""
    from hisaab.financial.portfolio import asset_dividends

    try:
        metrics, payouts = asset_dividends(load_ctx_ledger(ctx, ledger), asset_id, _as_date(today))
    except HisaabError as e:
        fail(e)

    if as_json:
        data = metrics.to_dict()
        data["payouts"] = [
            {
                "id": p.id,
                "ex_date": p.ex_date.isoformat(),
                "amount": str(p.amount),
                "shares_held": str(p.shares_held),
                "total_payout": str(p.total_payout),
            }
            for p in payouts
        ]
        echo_json(data)
        return

    echo_rows(
        [
            ("Total dividends", f"{metrics.total_dividends:,.2f}"),
            ("YTD dividends", f"{metrics.ytd_dividends:,.2f}"),
            ("Yield", f"{metrics.dividend_yield:,.2f}%"),
            ("Records", metrics.count),
        ]
    )
    for p in payouts:
        click.echo(f"  {p.ex_date.isoformat()}  {p.amount:f}/sh x {p.shares_held:f} = {p.total_payout:,.2f} {p.currency}")


@click.command()
@click.argument("liability_id", type=int)
@ledger_option
@json_option
@_TODAY_OPTION
@click.pass_context
def liability(ctx: click.Context, liability_id: int, ledger: str | None, as_json: bool, today: datetime | None) -> None:
    """Show payment totals for a liability."""
    from hisaab.financial.portfolio import liability_metrics

    try:
        metrics = liability_metrics(load_ctx_ledger(ctx, ledger), liability_id, _as_date(today))
    except HisaabError as e:
        fail(e)

    if as_json:
        echo_json(metrics.to_dict())
        return
    echo_rows(
        [
            ("Balance", f"{metrics.current_balance:,.2f}"),
            ("APR", f"{metrics.interest_rate:f}%"),
            ("Total paid", f"{metrics.total_paid:,.2f}"),
            ("Interest paid", f"{metrics.total_interest_paid:,.2f}"),
            ("Principal paid", f"{metrics.total_principal_paid:,.2f}"),
            ("YTD interest", f"{metrics.ytd_interest_paid:,.2f}"),
            ("YTD principal", f"{metrics.ytd_principal_paid:,.2f}"),
            ("Payments", metrics.payment_count),
        ]
    )
