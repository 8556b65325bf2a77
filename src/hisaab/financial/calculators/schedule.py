"""Recurring payment rule timing.

A rule is due once its next execution date is today or earlier. After it
fires, the next date advances one period from the *previous* scheduled date,
not from today, so a late run neither skips ahead nor catches up more than
one period.
"""

from __future__ import annotations

from datetime import date, datetime

from dateutil.relativedelta import relativedelta

from ..models import Frequency, LiabilityPaymentRule, to_date

_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.YEARLY: relativedelta(years=1),
}


def next_execution_date(current: date | datetime | str, frequency: Frequency | str) -> date:
    """Advance a date by one frequency step.

    Month and year steps clamp to the last day of the target month
    (Jan 31 -> Feb 28/29, Feb 29 -> Feb 28).

    Raises:
        ValueError: If ``frequency`` is not daily, weekly, monthly or yearly.
    """
    try:
        step = _STEPS[Frequency(frequency)]
    except ValueError as e:
        raise ValueError(f"Invalid frequency: {frequency!r}") from e
    return to_date(current) + step


def is_rule_due(rule: LiabilityPaymentRule, now: date | datetime) -> bool:
    """Enabled rules whose next execution date is on or before ``now``."""
    return rule.enabled and rule.next_execution_date <= to_date(now)
