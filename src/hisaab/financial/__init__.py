"""Personal finance engine: ledger models, calculators, rule execution."""

from .batch import BatchResult
from .ledger import InMemoryLedger, LedgerStore, load_ledger, save_ledger
from .models import (
    Asset,
    AssetType,
    Dividend,
    DividendType,
    Frequency,
    Liability,
    LiabilityPayment,
    LiabilityPaymentRule,
    PaymentType,
    Transaction,
    TransactionType,
)
from .rules import RuleExecution, RuleExecutor

__all__ = [
    "Asset",
    "AssetType",
    "BatchResult",
    "Dividend",
    "DividendType",
    "Frequency",
    "InMemoryLedger",
    "LedgerStore",
    "Liability",
    "LiabilityPayment",
    "LiabilityPaymentRule",
    "PaymentType",
    "RuleExecution",
    "RuleExecutor",
    "Transaction",
    "TransactionType",
    "load_ledger",
    "save_ledger",
]
