"""Dividend attribution.

A dividend pays ``amount`` per share to whoever held shares before its
ex-date. Holdings on a date are rebuilt from the trade ledger: every buy
or sell dated strictly before the cutoff counts, same-day trades do not.

The holding is recomputed per dividend (dividends x transactions), which is
fine at personal-portfolio scale and keeps each figure independent.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from loguru import logger

from hisaab.core.clock import resolve_today

from ..models import Asset, AssetType, Dividend, DividendType, Transaction

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass
class DividendWithPayout:
    """A dividend annotated with what this portfolio actually received."""

    id: int
    ex_date: date
    payment_date: date | None
    amount: Decimal
    currency: str
    type: DividendType
    shares_held: Decimal
    total_payout: Decimal


@dataclass
class DividendMetrics:
    """Dividend totals for one asset.

    Attributes:
        total_dividends: Sum of payouts over all eligible dividends.
        ytd_dividends: Eligible payouts with an ex-date in the current year.
        dividend_yield: Per-share dividends with an ex-date after the same day
            one year ago, over the implied share price, in percent.
        count: Number of dividend records, eligible or not.
    """

    total_dividends: Decimal
    ytd_dividends: Decimal
    dividend_yield: Decimal
    count: int

    def to_dict(self) -> dict:
        return {
            "total_dividends": str(self.total_dividends),
            "ytd_dividends": str(self.ytd_dividends),
            "dividend_yield": str(self.dividend_yield),
            "count": self.count,
        }


def shares_held_on(transactions: Iterable[Transaction], cutoff: date) -> Decimal:
    """Net shares from all trades dated strictly before ``cutoff``."""
    return sum((t.signed_quantity for t in transactions if t.date < cutoff), _ZERO)


def _eligible_payouts(
    dividends: Iterable[Dividend], transactions: Sequence[Transaction]
) -> list[tuple[Dividend, Decimal, Decimal]]:
    eligible = []
    for div in dividends:
        shares = shares_held_on(transactions, div.ex_date)
        if shares > 0:
            eligible.append((div, shares, div.amount * shares))
    return eligible


def calculate_dividend_income(
    asset: Asset,
    transactions: Sequence[Transaction],
    dividends: Iterable[Dividend],
) -> Decimal:
    """Total received over all eligible dividends; 0 for assets without a ticker."""
    if not asset.symbol:
        return _ZERO
    return sum((payout for _, _, payout in _eligible_payouts(dividends, transactions)), _ZERO)


def calculate_dividends_with_payouts(
    dividends: Iterable[Dividend],
    transactions: Sequence[Transaction],
) -> list[DividendWithPayout]:
    """Eligible dividends with shares held and payout, newest ex-date first.

    Dividends with no shares held on the ex-date are left out entirely.
    """
    annotated = [
        DividendWithPayout(
            id=div.id,
            ex_date=div.ex_date,
            payment_date=div.payment_date,
            amount=div.amount,
            currency=div.currency,
            type=div.type,
            shares_held=shares,
            total_payout=payout,
        )
        for div, shares, payout in _eligible_payouts(dividends, transactions)
    ]
    annotated.sort(key=lambda d: d.ex_date, reverse=True)
    return annotated


def calculate_dividend_metrics(
    asset: Asset,
    dividends: Sequence[Dividend],
    transactions: Sequence[Transaction],
    today: date | None = None,
) -> DividendMetrics:
    """Aggregate dividend totals, YTD income and trailing yield for one asset.

    Args:
        asset: The asset, for its cached value and quantity.
        dividends: All dividend records for the asset.
        transactions: All trades for the asset, any order.
        today: Pins the current year and the trailing window.
    """
    today = resolve_today(today)

    total = ytd = _ZERO
    for div, _, payout in _eligible_payouts(dividends, transactions):
        total += payout
        if div.ex_date.year == today.year:
            ytd += payout

    dividend_yield = _ZERO
    if asset.quantity:
        price_per_share = asset.implied_price or _ZERO
        window_start = today - relativedelta(years=1)
        trailing = sum((d.amount for d in dividends if d.ex_date > window_start), _ZERO)
        if price_per_share > 0 and trailing > 0:
            dividend_yield = trailing / price_per_share * _HUNDRED

    logger.debug(f"Dividend metrics for asset {asset.id}: total={total} ytd={ytd} yield={dividend_yield}")
    return DividendMetrics(
        total_dividends=total,
        ytd_dividends=ytd,
        dividend_yield=dividend_yield,
        count=len(dividends),
    )


def portfolio_ytd_dividends(
    assets: Iterable[Asset],
    dividends: Iterable[Dividend],
    transactions: Iterable[Transaction],
    today: date | None = None,
) -> Decimal:
    """Year-to-date dividend income across all ticker-bearing investment assets.

    Records are grouped by asset once; metrics are then computed per asset.
    """
    today = resolve_today(today)
    dividends_by_asset: dict[int, list[Dividend]] = defaultdict(list)
    transactions_by_asset: dict[int, list[Transaction]] = defaultdict(list)
    for div in dividends:
        dividends_by_asset[div.asset_id].append(div)
    for t in transactions:
        transactions_by_asset[t.asset_id].append(t)

    total = _ZERO
    for asset in assets:
        if asset.type != AssetType.INVESTMENT or not asset.symbol:
            continue
        metrics = calculate_dividend_metrics(
            asset,
            dividends_by_asset.get(asset.id, []),
            transactions_by_asset.get(asset.id, []),
            today=today,
        )
        total += metrics.ytd_dividends
    return total
