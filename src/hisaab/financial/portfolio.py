"""Store-facing operations around the pure calculators.

These load what a calculation needs from a ``LedgerStore``, run the pure
engine, and write derived state back:

- asset rollups (``quantity``/``value``) are a projection of the trade
  ledger, recomputed explicitly after every trade write;
- manual liability payments;
- the throttled, out-of-band price refresh through a ``QuoteProvider``.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable

from loguru import logger

from hisaab.core.config import get_config
from hisaab.core.exceptions import APIError
from hisaab.core.types import Numeric

from .batch import BatchResult
from .calculators.dividends import (
    DividendMetrics,
    DividendWithPayout,
    calculate_dividend_metrics,
    calculate_dividends_with_payouts,
)
from .calculators.payments import LiabilityMetrics, calculate_liability_metrics, calculate_payment_portions
from .calculators.profit import ProfitResult, calculate_profit
from .ledger import LedgerStore
from .models import (
    Asset,
    AssetType,
    LiabilityPayment,
    PaymentType,
    Transaction,
    quantize_money,
    quantize_shares,
    to_date,
    to_decimal,
)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class PriceQuote:
    """A price observation from a market-data provider."""

    symbol: str
    price: Decimal
    currency: str
    last_updated: datetime


@runtime_checkable
class QuoteProvider(Protocol):
    """Anything that can price a ticker. Returns None when it cannot."""

    def get_quote(self, symbol: str) -> PriceQuote | None: ...


# ── Asset rollups ──────────────────────────────────────────────────


def recompute_asset_rollup(asset: Asset, transactions: Iterable[Transaction], quote: PriceQuote | None = None) -> Asset:
    """Rebuild an asset's cached quantity (and value, given a quote) from its trades.

    Returns a new ``Asset``; the input is not modified.
    """
    total_shares = sum((t.signed_quantity for t in transactions), _ZERO)
    if quote is None:
        return replace(asset, quantity=quantize_shares(total_shares))
    return replace(
        asset,
        quantity=quantize_shares(total_shares),
        value=quantize_money(total_shares * to_decimal(quote.price)),
        currency=quote.currency,
        last_price_update=quote.last_updated,
    )


def _refresh_rollup(store: LedgerStore, asset_id: int, provider: QuoteProvider | None) -> Asset:
    asset = store.get_asset(asset_id)
    quote = provider.get_quote(asset.symbol) if provider is not None and asset.symbol else None
    updated = recompute_asset_rollup(asset, store.transactions_for(asset_id), quote)
    store.update_asset(updated)
    return updated


def record_transaction(
    store: LedgerStore, transaction: Transaction, provider: QuoteProvider | None = None
) -> Transaction:
    """Append a trade and refresh the owning asset's rollup."""
    stored = store.add_transaction(transaction)
    _refresh_rollup(store, stored.asset_id, provider)
    return stored


def remove_transaction(store: LedgerStore, transaction_id: int, provider: QuoteProvider | None = None) -> Asset:
    """Delete a trade and return the owning asset with its rollup refreshed."""
    removed = store.delete_transaction(transaction_id)
    return _refresh_rollup(store, removed.asset_id, provider)


# ── Per-entity calculations ────────────────────────────────────────


def asset_profit(store: LedgerStore, asset_id: int) -> ProfitResult:
    """Profit snapshot for a stored asset. Raises NotFoundError if absent."""
    asset = store.get_asset(asset_id)
    return calculate_profit(asset, store.transactions_for(asset_id), store.dividends_for(asset_id))


def asset_dividends(
    store: LedgerStore, asset_id: int, today: date | None = None
) -> tuple[DividendMetrics, list[DividendWithPayout]]:
    """Dividend metrics and eligible payouts for a stored asset."""
    asset = store.get_asset(asset_id)
    dividends = store.dividends_for(asset_id)
    transactions = store.transactions_for(asset_id)
    metrics = calculate_dividend_metrics(asset, dividends, transactions, today=today)
    return metrics, calculate_dividends_with_payouts(dividends, transactions)


def liability_metrics(store: LedgerStore, liability_id: int, today: date | None = None) -> LiabilityMetrics:
    liability = store.get_liability(liability_id)
    return calculate_liability_metrics(liability, store.payments_for(liability_id), today=today)


def record_manual_payment(
    store: LedgerStore,
    liability_id: int,
    amount: Numeric,
    on: date | datetime | str,
    notes: str | None = None,
) -> LiabilityPayment:
    """Record a user-entered payment and reduce the balance (floored at 0).

    The split uses the full amount as entered, even above the balance.

    Raises:
        NotFoundError: The liability does not exist.
        ValueError: The amount is not positive.
    """
    amount = to_decimal(amount)
    if amount <= 0:
        raise ValueError(f"Payment amount must be positive: {amount}")
    paid_on = to_date(on)

    liability = store.get_liability(liability_id)
    portions = calculate_payment_portions(liability.balance, liability.apr, amount)

    payment = store.add_payment(
        LiabilityPayment(
            liability_id=liability_id,
            date=paid_on,
            amount=quantize_money(amount),
            principal_portion=quantize_money(portions.principal_portion),
            interest_portion=quantize_money(portions.interest_portion),
            type=PaymentType.MANUAL,
            notes=notes or None,
        )
    )
    new_balance = quantize_money(max(_ZERO, liability.balance - amount))
    store.update_liability(replace(liability, balance=new_balance, last_payment_date=paid_on))
    logger.info(f"Manual payment of {payment.amount} on liability {liability_id}, balance now {new_balance}")
    return payment


# ── Price refresh ──────────────────────────────────────────────────


def refresh_prices(
    store: LedgerStore,
    provider: QuoteProvider,
    delay_seconds: float | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> BatchResult:
    """Re-price every investment asset that has a ticker and a quantity.

    Requests are spaced ``delay_seconds`` apart to stay under provider rate
    limits; when not given, the delay comes from the
    ``prices.refresh_delay_seconds`` config key. A symbol the provider cannot
    price is reported, not fatal.
    """
    candidates = [
        a for a in store.list_assets() if a.type == AssetType.INVESTMENT and a.symbol and a.quantity is not None
    ]
    if not candidates:
        return BatchResult(message="No investment assets with symbols to update")
    if delay_seconds is None:
        delay_seconds = float(get_config().get("prices.refresh_delay_seconds", 1.0))

    result = BatchResult()
    for i, asset in enumerate(candidates):
        try:
            quote = provider.get_quote(asset.symbol)
        except APIError as e:
            logger.warning(f"Quote request for {asset.symbol} failed: {e}")
            quote = None

        if quote is None:
            result.errors.append(asset.symbol)
        else:
            store.update_asset(
                replace(
                    asset,
                    value=quantize_money(to_decimal(quote.price) * asset.quantity),
                    currency=quote.currency,
                    last_price_update=quote.last_updated,
                )
            )
            result.succeeded += 1

        if i < len(candidates) - 1 and delay_seconds > 0:
            sleep(delay_seconds)

    if result.errors:
        result.message = f"Updated {result.succeeded} assets. Failed: {', '.join(result.errors)}"
    else:
        result.message = f"Successfully updated {result.succeeded} assets"
    logger.info(result.message)
    return result
