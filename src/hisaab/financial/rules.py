"""Recurring liability payment execution.

The trigger (cron, a CLI call) lives outside; this module decides which
rules are due and applies one payment per due rule:

1. skip liabilities that are already paid off,
2. evaluate the rule's formula against the current balance and APR,
3. cap the payment at the balance and split it into interest/principal,
4. record an automatic payment, reduce the balance, advance the rule.

Everything is computed before anything is written, so a rule that fails
keeps its ``next_execution_date`` and is retried on the next run.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal

from loguru import logger

from hisaab.core.clock import TodayFn, resolve_today

from .batch import BatchResult
from .calculators.formula import evaluate_formula
from .calculators.payments import calculate_payment_portions
from .calculators.schedule import is_rule_due, next_execution_date
from .ledger import LedgerStore
from .models import LiabilityPayment, LiabilityPaymentRule, PaymentType, quantize_money

_ZERO = Decimal("0")


@dataclass(frozen=True)
class RuleExecution:
    """A fired rule: the payment it recorded and the rule as advanced."""

    payment: LiabilityPayment
    rule: LiabilityPaymentRule
    new_balance: Decimal


class RuleExecutor:
    """Runs due payment rules against a ledger store.

    Args:
        store: Where liabilities, rules and payments live.
        clock: Provides "today" when a caller does not pass one.
    """

    def __init__(self, store: LedgerStore, clock: TodayFn | None = None):
        self.store = store
        self._clock = clock

    def list_due_rules(self, now: date | datetime | None = None) -> list[LiabilityPaymentRule]:
        """Enabled rules whose next execution date is on or before ``now``."""
        today = resolve_today(now, self._clock)
        return [rule for rule in self.store.list_rules() if is_rule_due(rule, today)]

    def execute_rule(self, rule: LiabilityPaymentRule, today: date | None = None) -> RuleExecution | None:
        """Apply one payment for ``rule``.

        Returns:
            The execution, or None when the liability has nothing left owing.

        Raises:
            NotFoundError: The rule's liability does not exist.
            InvalidFormulaError: The rule's formula cannot be evaluated.
        """
        today = resolve_today(today, self._clock)
        liability = self.store.get_liability(rule.liability_id)
        balance = liability.balance

        if balance <= 0:
            logger.debug(f"Rule {rule.id}: liability {liability.id} has no balance, skipping")
            return None

        amount = evaluate_formula(rule.formula_expression, {"balance": balance, "interestRate": liability.apr})
        actual = min(amount, balance)
        portions = calculate_payment_portions(balance, liability.apr, actual)

        payment = LiabilityPayment(
            liability_id=liability.id,
            date=today,
            amount=quantize_money(actual),
            principal_portion=quantize_money(portions.principal_portion),
            interest_portion=quantize_money(portions.interest_portion),
            type=PaymentType.AUTOMATIC,
            notes=f"Automatic payment from rule: {rule.formula_expression}",
        )
        new_balance = quantize_money(max(_ZERO, balance - actual))
        advanced = replace(
            rule,
            last_execution_date=today,
            next_execution_date=next_execution_date(rule.next_execution_date, rule.frequency),
        )

        payment = self.store.add_payment(payment)
        self.store.update_liability(replace(liability, balance=new_balance, last_payment_date=today))
        self.store.update_rule(advanced)

        logger.info(
            f"Rule {rule.id}: paid {payment.amount} on liability {liability.id} "
            f"(interest {payment.interest_portion}, principal {payment.principal_portion}), "
            f"next run {advanced.next_execution_date}"
        )
        return RuleExecution(payment=payment, rule=advanced, new_balance=new_balance)

    def execute_due_rules(self, now: date | datetime | None = None) -> BatchResult:
        """Execute every due rule, isolating failures per rule."""
        today = resolve_today(now, self._clock)
        due = self.list_due_rules(today)
        if not due:
            return BatchResult(message="No payment rules due for execution")

        result = BatchResult()
        for rule in due:
            try:
                if self.execute_rule(rule, today) is not None:
                    result.succeeded += 1
            except Exception as e:
                logger.exception(f"Error processing rule {rule.id}: {e}")
                result.errors.append(f"Rule {rule.id}: {e}")

        if result.errors:
            result.message = f"Executed {result.succeeded} payments with {len(result.errors)} errors"
        else:
            result.message = f"Successfully executed {result.succeeded} automatic payments"
        logger.info(result.message)
        return result
