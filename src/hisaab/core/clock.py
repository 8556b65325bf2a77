"""
Injectable notion of "today".

Year-to-date totals, trailing-yield windows, and rule due checks all depend
on the calendar date. Engine functions accept an explicit ``today`` so tests
can pin it; ``None`` falls back to the system clock here and nowhere else.
"""

from collections.abc import Callable
from datetime import date, datetime

TodayFn = Callable[[], date]


def system_today() -> date:
    """Return the local calendar date."""
    return date.today()


def resolve_today(today: date | datetime | None = None, clock: TodayFn | None = None) -> date:
    """Normalize an optional ``today`` argument to a plain ``date``.

    Args:
        today: Explicit date (or datetime, truncated to its date).
        clock: Fallback provider used when ``today`` is None.
    """
    if today is None:
        today = (clock or system_today)()
    if isinstance(today, datetime):
        return today.date()
    return today
