"""Liability payment math.

Splits a payment into interest and principal using a simple monthly-rate
model, and folds a payment history into lifetime and year-to-date totals.

Pure functions over already-loaded records; nothing here rounds. Callers
round to cents when they persist a payment.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from hisaab.core.clock import resolve_today
from hisaab.core.types import Numeric

from ..models import Liability, LiabilityPayment, to_decimal

MONTHS_PER_YEAR = Decimal("12")
_HUNDRED = Decimal("100")
_ZERO = Decimal("0")


@dataclass(frozen=True)
class PaymentPortions:
    """How one payment divides between interest and principal."""

    principal_portion: Decimal
    interest_portion: Decimal


@dataclass
class LiabilityMetrics:
    """Lifetime and year-to-date totals for a liability."""

    current_balance: Decimal
    interest_rate: Decimal
    total_paid: Decimal
    total_interest_paid: Decimal
    total_principal_paid: Decimal
    ytd_paid: Decimal
    ytd_interest_paid: Decimal
    ytd_principal_paid: Decimal
    payment_count: int

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "current_balance": str(self.current_balance),
            "interest_rate": str(self.interest_rate),
            "total_paid": str(self.total_paid),
            "total_interest_paid": str(self.total_interest_paid),
            "total_principal_paid": str(self.total_principal_paid),
            "ytd_paid": str(self.ytd_paid),
            "ytd_interest_paid": str(self.ytd_interest_paid),
            "ytd_principal_paid": str(self.ytd_principal_paid),
            "payment_count": self.payment_count,
        }


def calculate_payment_portions(balance: Numeric, interest_rate: Numeric, payment_amount: Numeric) -> PaymentPortions:
    """Split a payment into interest and principal.

    Interest is one month of APR on the outstanding balance; the rest of the
    payment goes to principal. The principal portion is negative when the
    payment does not cover accrued interest; clamping is the caller's policy.

    Args:
        balance: Outstanding balance before the payment.
        interest_rate: APR in percent (e.g. 12 for 12%).
        payment_amount: Total amount paid.
    """
    monthly_rate = to_decimal(interest_rate) / _HUNDRED / MONTHS_PER_YEAR
    interest_portion = to_decimal(balance) * monthly_rate
    principal_portion = to_decimal(payment_amount) - interest_portion
    return PaymentPortions(principal_portion=principal_portion, interest_portion=interest_portion)


def calculate_liability_metrics(
    liability: Liability,
    payments: Iterable[LiabilityPayment],
    today: date | None = None,
) -> LiabilityMetrics:
    """Fold a payment history into totals.

    Portions are summed as stored; a missing portion counts as 0. Year-to-date
    figures use the calendar year of ``today``.
    """
    current_year = resolve_today(today).year

    total_paid = total_interest = total_principal = _ZERO
    ytd_paid = ytd_interest = ytd_principal = _ZERO
    count = 0

    for payment in payments:
        count += 1
        interest = payment.interest_portion if payment.interest_portion is not None else _ZERO
        principal = payment.principal_portion if payment.principal_portion is not None else _ZERO

        total_paid += payment.amount
        total_interest += interest
        total_principal += principal

        if payment.date.year == current_year:
            ytd_paid += payment.amount
            ytd_interest += interest
            ytd_principal += principal

    return LiabilityMetrics(
        current_balance=liability.balance,
        interest_rate=liability.apr,
        total_paid=total_paid,
        total_interest_paid=total_interest,
        total_principal_paid=total_principal,
        ytd_paid=ytd_paid,
        ytd_interest_paid=ytd_interest,
        ytd_principal_paid=ytd_principal,
        payment_count=count,
    )
