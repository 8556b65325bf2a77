"""Financial calculators: cost basis, dividends, liability payments, formulas."""

from .dividends import (
    DividendMetrics,
    DividendWithPayout,
    calculate_dividend_income,
    calculate_dividend_metrics,
    calculate_dividends_with_payouts,
    portfolio_ytd_dividends,
    shares_held_on,
)
from .formula import FORMULA_VARIABLES, evaluate_formula, validate_formula
from .payments import (
    LiabilityMetrics,
    PaymentPortions,
    calculate_liability_metrics,
    calculate_payment_portions,
)
from .profit import Lot, ProfitResult, calculate_assets_profit, calculate_profit, replay_fifo
from .schedule import is_rule_due, next_execution_date

__all__ = [
    "FORMULA_VARIABLES",
    "DividendMetrics",
    "DividendWithPayout",
    "LiabilityMetrics",
    "Lot",
    "PaymentPortions",
    "ProfitResult",
    "calculate_assets_profit",
    "calculate_dividend_income",
    "calculate_dividend_metrics",
    "calculate_dividends_with_payouts",
    "calculate_liability_metrics",
    "calculate_payment_portions",
    "calculate_profit",
    "evaluate_formula",
    "is_rule_due",
    "next_execution_date",
    "portfolio_ytd_dividends",
    "replay_fifo",
    "shares_held_on",
    "validate_formula",
]
