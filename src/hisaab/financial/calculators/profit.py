"""Cost basis and gain accounting.

Replays an asset's trade ledger oldest-first through a FIFO queue of
purchase lots. Sells consume lots from the front and realize
``shares x (sell price - lot price)`` per lot touched. What survives in the
queue is the open position and its remaining cost basis.

Current price is always backed out of the asset's cached total value;
this module never fetches quotes.
"""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal

from loguru import logger

from ..models import Asset, Dividend, Transaction, TransactionType
from .dividends import calculate_dividend_income

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


@dataclass
class Lot:
    """An open purchase batch."""

    shares: Decimal
    price_per_share: Decimal

    @property
    def cost(self) -> Decimal:
        return self.shares * self.price_per_share


@dataclass
class ProfitResult:
    """Snapshot of an asset's position and gains.

    Attributes:
        total_shares: Net shares after replaying every trade.
        avg_cost_basis: Remaining cost per held share.
        current_price: Cached value divided by shares held.
        current_value: Shares held at the current price.
        total_cost: Cost basis of the surviving lots.
        unrealized_gain: Current value minus remaining cost.
        realized_gain: Gains locked in by sells (FIFO).
        dividend_income: Payouts over eligible dividends.
        total_gain: Unrealized + realized + dividends.
        gain_percentage: Total gain over remaining cost, in percent; 0 when
            no cost remains, even if realized gains or dividends exist.
        has_transactions: False for the zeroed result of an empty ledger.
    """

    total_shares: Decimal
    avg_cost_basis: Decimal
    current_price: Decimal
    current_value: Decimal
    total_cost: Decimal
    unrealized_gain: Decimal
    realized_gain: Decimal
    dividend_income: Decimal
    total_gain: Decimal
    gain_percentage: Decimal
    has_transactions: bool = True

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_shares": str(self.total_shares),
            "avg_cost_basis": str(self.avg_cost_basis),
            "current_price": str(self.current_price),
            "current_value": str(self.current_value),
            "total_cost": str(self.total_cost),
            "unrealized_gain": str(self.unrealized_gain),
            "realized_gain": str(self.realized_gain),
            "dividend_income": str(self.dividend_income),
            "total_gain": str(self.total_gain),
            "gain_percentage": str(self.gain_percentage),
            "has_transactions": self.has_transactions,
        }


@dataclass
class FifoState:
    """Running state of a FIFO replay."""

    total_shares: Decimal
    realized_gain: Decimal
    lots: deque[Lot]
    unmatched_shares: Decimal = _ZERO

    @property
    def remaining_cost(self) -> Decimal:
        return sum((lot.cost for lot in self.lots), _ZERO)


def sort_chronologically(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Oldest first; same-day trades keep the order they arrived in."""
    return sorted(transactions, key=lambda t: t.date)


def replay_fifo(transactions: Sequence[Transaction]) -> FifoState:
    """Replay chronologically ordered trades through a FIFO lot queue.

    Selling more than the open lots hold is not an error: the excess is
    simply left unmatched (and counted in ``unmatched_shares``), so realized
    gain only covers the matched part.
    """
    state = FifoState(total_shares=_ZERO, realized_gain=_ZERO, lots=deque())

    for t in transactions:
        if t.type == TransactionType.BUY:
            state.total_shares += t.quantity
            state.lots.append(Lot(shares=t.quantity, price_per_share=t.price_per_share))
            continue

        state.total_shares -= t.quantity
        remaining = t.quantity
        while remaining > 0 and state.lots:
            lot = state.lots[0]
            matched = min(remaining, lot.shares)
            state.realized_gain += matched * (t.price_per_share - lot.price_per_share)
            lot.shares -= matched
            remaining -= matched
            if lot.shares <= 0:
                state.lots.popleft()

        if remaining > 0:
            logger.warning(f"Transaction {t.id}: sold {remaining} more shares than held in open lots")
            state.unmatched_shares += remaining

    return state


def _empty_result(asset: Asset) -> ProfitResult:
    if asset.quantity is not None and asset.quantity > 0:
        current_price = asset.value / asset.quantity
    else:
        current_price = asset.value
    return ProfitResult(
        total_shares=_ZERO,
        avg_cost_basis=_ZERO,
        current_price=current_price,
        current_value=_ZERO,
        total_cost=_ZERO,
        unrealized_gain=_ZERO,
        realized_gain=_ZERO,
        dividend_income=_ZERO,
        total_gain=_ZERO,
        gain_percentage=_ZERO,
        has_transactions=False,
    )


def calculate_profit(
    asset: Asset,
    transactions: Iterable[Transaction],
    dividends: Iterable[Dividend],
) -> ProfitResult:
    """Compute position, cost basis and gains for one asset.

    Args:
        asset: The asset with its cached ``value`` and ``quantity``.
        transactions: All trades for the asset, any order.
        dividends: All dividend records for the asset.

    Returns:
        A ``ProfitResult``. An empty ledger yields a zeroed result whose
        ``current_price`` is ``value / quantity`` (or ``value`` when the
        asset is not unitized).
    """
    ordered = sort_chronologically(transactions)
    if not ordered:
        return _empty_result(asset)

    state = replay_fifo(ordered)
    dividend_income = calculate_dividend_income(asset, ordered, dividends)
    remaining_cost = state.remaining_cost
    total_shares = state.total_shares

    current_price = asset.value / total_shares if total_shares > 0 else _ZERO
    current_value = total_shares * current_price
    unrealized_gain = current_value - remaining_cost
    total_gain = unrealized_gain + state.realized_gain + dividend_income
    avg_cost_basis = remaining_cost / total_shares if total_shares > 0 else _ZERO
    gain_percentage = total_gain / remaining_cost * _HUNDRED if remaining_cost > 0 else _ZERO

    return ProfitResult(
        total_shares=total_shares,
        avg_cost_basis=avg_cost_basis,
        current_price=current_price,
        current_value=current_value,
        total_cost=remaining_cost,
        unrealized_gain=unrealized_gain,
        realized_gain=state.realized_gain,
        dividend_income=dividend_income,
        total_gain=total_gain,
        gain_percentage=gain_percentage,
    )


def calculate_assets_profit(
    asset_ids: Iterable[int],
    assets: Iterable[Asset],
    transactions: Iterable[Transaction],
    dividends: Iterable[Dividend],
) -> dict[int, ProfitResult]:
    """Profit snapshots for many assets from one bulk load of records.

    Unknown asset ids are skipped.
    """
    asset_map = {a.id: a for a in assets}
    transactions_by_asset: dict[int, list[Transaction]] = defaultdict(list)
    dividends_by_asset: dict[int, list[Dividend]] = defaultdict(list)
    for t in transactions:
        transactions_by_asset[t.asset_id].append(t)
    for d in dividends:
        dividends_by_asset[d.asset_id].append(d)

    results: dict[int, ProfitResult] = {}
    for asset_id in asset_ids:
        asset = asset_map.get(asset_id)
        if asset is None:
            logger.debug(f"Skipping unknown asset {asset_id}")
            continue
        results[asset_id] = calculate_profit(
            asset,
            transactions_by_asset.get(asset_id, []),
            dividends_by_asset.get(asset_id, []),
        )
    return results
