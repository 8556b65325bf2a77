"""Core financial data models.

Assets and their trade/dividend ledgers, liabilities and their payment
history and recurring payment rules. Records are plain dataclasses; any
persistence layer (YAML ledger, SQL rows, API payloads) can produce them.

Money and share counts are always ``Decimal``. Constructors accept ints,
floats and strings and coerce them through ``Decimal(str(x))`` so binary
float noise never leaks into the engine.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import StrEnum
from typing import Any

CENT = Decimal("0.01")
SHARE_UNIT = Decimal("0.0001")


class AssetType(StrEnum):
    """Broad asset classes tracked by the portfolio."""

    INVESTMENT = "investment"
    BANK = "bank"
    PROPERTY = "property"
    CRYPTO = "crypto"
    OTHER = "other"


class TransactionType(StrEnum):
    BUY = "buy"
    SELL = "sell"


class DividendType(StrEnum):
    CASH = "cash"
    STOCK = "stock"


class Frequency(StrEnum):
    """How often a recurring payment rule fires."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class PaymentType(StrEnum):
    MANUAL = "manual"
    AUTOMATIC = "automatic"


def to_decimal(value: Any) -> Decimal:
    """Coerce a number-like value to ``Decimal`` without float artefacts."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a number: {value!r}")
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValueError(f"Not a number: {value!r}") from e


def to_date(value: Any) -> date:
    """Coerce a date, datetime or ISO-8601 string to a calendar ``date``.

    Sub-day ordering is not tracked, so datetimes are truncated.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).date()
        except ValueError as e:
            raise ValueError(f"Not an ISO date: {value!r}") from e
    raise ValueError(f"Not a date: {value!r}")


def quantize_money(value: Decimal) -> Decimal:
    """Round to cents, half-up, as stored at persistence boundaries."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def quantize_shares(value: Decimal) -> Decimal:
    return value.quantize(SHARE_UNIT, rounding=ROUND_HALF_UP)


def _optional_decimal(value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return to_decimal(value)


def _optional_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    return to_date(value)


def _serialize(value: Any) -> Any:
    if isinstance(value, StrEnum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    return value


class _Record:
    """Shared helpers for ledger records."""

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict of YAML/JSON-safe values."""
        return {k: _serialize(v) for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a record from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


@dataclass
class Asset(_Record):
    """Something the user owns.

    Attributes:
        id: Unique identifier.
        name: Human-readable name.
        type: Asset class.
        value: Cached current *total* value in ``currency`` (not per unit).
        quantity: Total units held; None for assets that are not unitized.
        symbol: Ticker for quoted assets (stocks, ETFs, crypto pairs).
        currency: ISO currency code.
        last_price_update: When ``value`` was last refreshed from a quote.
    """

    id: int
    name: str
    type: AssetType
    value: Decimal
    quantity: Decimal | None = None
    symbol: str | None = None
    currency: str = "USD"
    last_price_update: datetime | None = None

    def __post_init__(self):
        self.type = AssetType(self.type)
        self.value = to_decimal(self.value)
        self.quantity = _optional_decimal(self.quantity)
        if isinstance(self.last_price_update, str):
            self.last_price_update = datetime.fromisoformat(self.last_price_update)
        if not self.name:
            raise ValueError("Asset name cannot be empty")

    @property
    def implied_price(self) -> Decimal | None:
        """Per-unit price backed out of the cached value, if unitized."""
        if self.quantity is None or self.quantity <= 0:
            return None
        return self.value / self.quantity


@dataclass
class Transaction(_Record):
    """A buy or sell of an asset. Immutable once recorded."""

    id: int
    asset_id: int
    type: TransactionType
    date: date
    quantity: Decimal
    price_per_share: Decimal
    total_value: Decimal | None = None
    notes: str | None = None

    def __post_init__(self):
        self.type = TransactionType(self.type)
        self.date = to_date(self.date)
        self.quantity = to_decimal(self.quantity)
        self.price_per_share = to_decimal(self.price_per_share)
        if self.quantity <= 0:
            raise ValueError(f"Transaction {self.id} quantity must be positive: {self.quantity}")
        if self.price_per_share <= 0:
            raise ValueError(f"Transaction {self.id} price must be positive: {self.price_per_share}")
        if self.total_value is None:
            self.total_value = quantize_money(self.quantity * self.price_per_share)
        else:
            self.total_value = to_decimal(self.total_value)

    @property
    def signed_quantity(self) -> Decimal:
        """Shares added (+) or removed (-) by this trade."""
        return self.quantity if self.type == TransactionType.BUY else -self.quantity


@dataclass
class Dividend(_Record):
    """A declared per-share distribution.

    Attributes:
        ex_date: Eligibility cutoff; only shares held strictly before it count.
        amount: Amount per share.
        payment_date: When it was (or will be) paid, if known.
    """

    id: int
    asset_id: int
    ex_date: date
    amount: Decimal
    payment_date: date | None = None
    currency: str = "USD"
    type: DividendType = DividendType.CASH

    def __post_init__(self):
        self.ex_date = to_date(self.ex_date)
        self.payment_date = _optional_date(self.payment_date)
        self.amount = to_decimal(self.amount)
        self.type = DividendType(self.type)


@dataclass
class Liability(_Record):
    """Money owed: loans, mortgages, credit cards.

    ``interest_rate`` is an APR in percent (e.g. 6.5), None meaning 0.
    """

    id: int
    name: str
    balance: Decimal
    interest_rate: Decimal | None = None
    currency: str = "USD"
    type: str = "loan"
    last_payment_date: date | None = None

    def __post_init__(self):
        self.balance = to_decimal(self.balance)
        self.interest_rate = _optional_decimal(self.interest_rate)
        self.last_payment_date = _optional_date(self.last_payment_date)

    @property
    def apr(self) -> Decimal:
        return self.interest_rate if self.interest_rate is not None else Decimal("0")


@dataclass
class LiabilityPaymentRule(_Record):
    """A recurring automatic payment against a liability.

    ``formula_expression`` is evaluated with ``balance`` and ``interestRate``
    bound to the liability's current values each time the rule fires.
    """

    id: int
    liability_id: int
    frequency: Frequency
    formula_expression: str
    next_execution_date: date
    enabled: bool = True
    last_execution_date: date | None = None

    def __post_init__(self):
        self.frequency = Frequency(self.frequency)
        self.next_execution_date = to_date(self.next_execution_date)
        self.last_execution_date = _optional_date(self.last_execution_date)
        if not self.formula_expression or not self.formula_expression.strip():
            raise ValueError(f"Rule {self.id} has an empty formula")


@dataclass
class LiabilityPayment(_Record):
    """A recorded payment. Append-only."""

    liability_id: int
    date: date
    amount: Decimal
    principal_portion: Decimal | None = None
    interest_portion: Decimal | None = None
    type: PaymentType = PaymentType.MANUAL
    notes: str | None = None
    id: int | None = None

    def __post_init__(self):
        self.date = to_date(self.date)
        self.amount = to_decimal(self.amount)
        self.principal_portion = _optional_decimal(self.principal_portion)
        self.interest_portion = _optional_decimal(self.interest_portion)
        self.type = PaymentType(self.type)
