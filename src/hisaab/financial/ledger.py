"""Ledger storage: the persistence collaborator for the calculators.

``LedgerStore`` is the contract: anything that can hand back an asset's
trades and dividends, a liability's payments, and the payment rules
(SQL tables, an API, a YAML file) can implement it.

``InMemoryLedger`` is the reference implementation. ``load_ledger`` and
``save_ledger`` persist it as a single YAML document::

    assets:
      - {id: 1, name: Vanguard Total, type: investment, symbol: VTI, quantity: "10", value: "2500.00"}
    transactions:
      - {id: 1, asset_id: 1, type: buy, date: 2024-01-15, quantity: "10", price_per_share: "200"}
    dividends: []
    liabilities: []
    payment_rules: []
    payments: []
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml
from loguru import logger

from hisaab.core.exceptions import LedgerError, NotFoundError
from hisaab.core.types import PathLike

from .models import (
    Asset,
    Dividend,
    Liability,
    LiabilityPayment,
    LiabilityPaymentRule,
    Transaction,
)

_SECTIONS: dict[str, type] = {
    "assets": Asset,
    "transactions": Transaction,
    "dividends": Dividend,
    "liabilities": Liability,
    "payment_rules": LiabilityPaymentRule,
    "payments": LiabilityPayment,
}


@runtime_checkable
class LedgerStore(Protocol):
    """Protocol for reading and writing ledger records."""

    def get_asset(self, asset_id: int) -> Asset:
        """Return the asset. Raises NotFoundError if absent."""
        ...

    def list_assets(self) -> list[Asset]: ...

    def update_asset(self, asset: Asset) -> None: ...

    def transactions_for(self, asset_id: int) -> list[Transaction]:
        """Trades for an asset, newest first."""
        ...

    def add_transaction(self, transaction: Transaction) -> Transaction: ...

    def delete_transaction(self, transaction_id: int) -> Transaction:
        """Remove and return a trade. Raises NotFoundError if absent."""
        ...

    def dividends_for(self, asset_id: int) -> list[Dividend]: ...

    def replace_dividends(self, asset_id: int, dividends: list[Dividend]) -> None:
        """Drop every dividend for the asset, then insert ``dividends``."""
        ...

    def get_liability(self, liability_id: int) -> Liability:
        """Return the liability. Raises NotFoundError if absent."""
        ...

    def update_liability(self, liability: Liability) -> None: ...

    def list_rules(self) -> list[LiabilityPaymentRule]: ...

    def update_rule(self, rule: LiabilityPaymentRule) -> None: ...

    def payments_for(self, liability_id: int) -> list[LiabilityPayment]: ...

    def add_payment(self, payment: LiabilityPayment) -> LiabilityPayment: ...


@dataclass
class InMemoryLedger:
    """Ledger held in plain lists. Satisfies ``LedgerStore``."""

    assets: list[Asset] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    dividends: list[Dividend] = field(default_factory=list)
    liabilities: list[Liability] = field(default_factory=list)
    payment_rules: list[LiabilityPaymentRule] = field(default_factory=list)
    payments: list[LiabilityPayment] = field(default_factory=list)

    @staticmethod
    def _next_id(records: list[Any]) -> int:
        return max((r.id for r in records if r.id is not None), default=0) + 1

    @staticmethod
    def _replace(records: list[Any], record: Any, kind: str) -> None:
        for i, existing in enumerate(records):
            if existing.id == record.id:
                records[i] = record
                return
        raise NotFoundError(kind, record.id)

    # ── Assets ─────────────────────────────────────────────────────

    def get_asset(self, asset_id: int) -> Asset:
        for asset in self.assets:
            if asset.id == asset_id:
                return asset
        raise NotFoundError("asset", asset_id)

    def list_assets(self) -> list[Asset]:
        return list(self.assets)

    def add_asset(self, asset: Asset) -> Asset:
        if asset.id is None:
            asset.id = self._next_id(self.assets)
        self.assets.append(asset)
        return asset

    def update_asset(self, asset: Asset) -> None:
        self._replace(self.assets, asset, "asset")

    def transactions_for(self, asset_id: int) -> list[Transaction]:
        rows = [t for t in self.transactions if t.asset_id == asset_id]
        return sorted(rows, key=lambda t: t.date, reverse=True)

    def add_transaction(self, transaction: Transaction) -> Transaction:
        self.get_asset(transaction.asset_id)
        if transaction.id is None:
            transaction.id = self._next_id(self.transactions)
        self.transactions.append(transaction)
        return transaction

    def delete_transaction(self, transaction_id: int) -> Transaction:
        for i, t in enumerate(self.transactions):
            if t.id == transaction_id:
                return self.transactions.pop(i)
        raise NotFoundError("transaction", transaction_id)

    def dividends_for(self, asset_id: int) -> list[Dividend]:
        rows = [d for d in self.dividends if d.asset_id == asset_id]
        return sorted(rows, key=lambda d: d.ex_date, reverse=True)

    def replace_dividends(self, asset_id: int, dividends: list[Dividend]) -> None:
        self.dividends = [d for d in self.dividends if d.asset_id != asset_id]
        next_id = self._next_id(self.dividends)
        for div in dividends:
            div.asset_id = asset_id
            if div.id is None:
                div.id = next_id
                next_id += 1
            self.dividends.append(div)

    # ── Liabilities ────────────────────────────────────────────────

    def get_liability(self, liability_id: int) -> Liability:
        for liability in self.liabilities:
            if liability.id == liability_id:
                return liability
        raise NotFoundError("liability", liability_id)

    def update_liability(self, liability: Liability) -> None:
        self._replace(self.liabilities, liability, "liability")

    def list_rules(self) -> list[LiabilityPaymentRule]:
        return list(self.payment_rules)

    def add_rule(self, rule: LiabilityPaymentRule) -> LiabilityPaymentRule:
        self.get_liability(rule.liability_id)
        if rule.id is None:
            rule.id = self._next_id(self.payment_rules)
        self.payment_rules.append(rule)
        return rule

    def update_rule(self, rule: LiabilityPaymentRule) -> None:
        self._replace(self.payment_rules, rule, "payment rule")

    def payments_for(self, liability_id: int) -> list[LiabilityPayment]:
        rows = [p for p in self.payments if p.liability_id == liability_id]
        return sorted(rows, key=lambda p: p.date, reverse=True)

    def add_payment(self, payment: LiabilityPayment) -> LiabilityPayment:
        if payment.id is None:
            payment.id = self._next_id(self.payments)
        self.payments.append(payment)
        return payment

    # ── Serialization ──────────────────────────────────────────────

    def to_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {section: [r.to_dict() for r in getattr(self, section)] for section in _SECTIONS}

    @classmethod
    def from_dict(cls, data: dict[str, Any], default_currency: str = "USD") -> InMemoryLedger:
        """Build a ledger from parsed YAML/JSON.

        Records that carry a currency but omit it get ``default_currency``.

        Raises:
            LedgerError: If a section is not a list or a record is invalid.
        """
        kwargs: dict[str, list[Any]] = {}
        for section, record_cls in _SECTIONS.items():
            rows = data.get(section) or []
            if not isinstance(rows, list):
                raise LedgerError(f"Ledger section '{section}' must be a list")
            has_currency = any(f.name == "currency" for f in fields(record_cls))
            records = []
            for i, row in enumerate(rows):
                if not isinstance(row, dict):
                    raise LedgerError(f"{section}[{i}] must be a mapping")
                if has_currency and "currency" not in row:
                    row = {**row, "currency": default_currency}
                try:
                    records.append(record_cls.from_dict(row))
                except (TypeError, ValueError) as e:
                    raise LedgerError(f"{section}[{i}] is invalid: {e}") from e
            kwargs[section] = records
        return cls(**kwargs)


def load_ledger(path: PathLike, default_currency: str = "USD") -> InMemoryLedger:
    """Load a YAML ledger file. A missing file yields an empty ledger.

    ``default_currency`` fills in assets, dividends and liabilities that
    do not name a currency (config key ``currency.default``).
    """
    path = Path(os.path.expanduser(str(path)))
    if not path.exists():
        logger.info(f"Ledger {path} does not exist yet, starting empty")
        return InMemoryLedger()
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise LedgerError(f"Could not parse ledger {path}: {e}") from e
    if not isinstance(data, dict):
        raise LedgerError(f"Ledger {path} must contain a mapping at the top level")
    ledger = InMemoryLedger.from_dict(data, default_currency=default_currency)
    logger.debug(f"Loaded ledger {path}: {len(ledger.assets)} assets, {len(ledger.liabilities)} liabilities")
    return ledger


def save_ledger(ledger: InMemoryLedger, path: PathLike) -> None:
    """Write the ledger as YAML, replacing the file atomically."""
    path = Path(os.path.expanduser(str(path)))
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(path.suffix + ".tmp")
    with open(tmp_path, "w") as f:
        yaml.safe_dump(ledger.to_dict(), f, sort_keys=False, allow_unicode=True)
    os.replace(tmp_path, path)
