"""Tests for hisaab.financial.calculators.schedule."""

from datetime import date, datetime

import pytest

from hisaab.financial.calculators.schedule import is_rule_due, next_execution_date
from hisaab.financial.models import Frequency, LiabilityPaymentRule


class TestNextExecutionDate:
    def test_daily(self):
        assert next_execution_date(date(2024, 12, 31), "daily") == date(2025, 1, 1)

    def test_weekly(self):
        assert next_execution_date(date(2024, 1, 29), Frequency.WEEKLY) == date(2024, 2, 5)

    def test_monthly(self):
        assert next_execution_date(date(2024, 1, 15), "monthly") == date(2024, 2, 15)

    def test_monthly_clamps_to_month_end(self):
        assert next_execution_date(date(2024, 1, 31), "monthly") == date(2024, 2, 29)
        assert next_execution_date(date(2023, 1, 31), "monthly") == date(2023, 2, 28)

    def test_yearly_from_leap_day(self):
        assert next_execution_date(date(2024, 2, 29), "yearly") == date(2025, 2, 28)

    def test_accepts_datetime_and_string(self):
        assert next_execution_date(datetime(2024, 3, 1, 9, 0), "daily") == date(2024, 3, 2)
        assert next_execution_date("2024-03-01", "weekly") == date(2024, 3, 8)

    def test_invalid_frequency(self):
        with pytest.raises(ValueError, match="Invalid frequency"):
            next_execution_date(date(2024, 1, 1), "fortnightly")


class TestIsRuleDue:
    def _rule(self, next_date, enabled=True):
        return LiabilityPaymentRule(
            id=1,
            liability_id=1,
            frequency="monthly",
            formula_expression="100",
            next_execution_date=next_date,
            enabled=enabled,
        )

    def test_due_on_the_day(self):
        assert is_rule_due(self._rule(date(2024, 5, 1)), date(2024, 5, 1))

    def test_overdue(self):
        assert is_rule_due(self._rule(date(2024, 4, 1)), datetime(2024, 5, 1, 0, 5))

    def test_not_yet_due(self):
        assert not is_rule_due(self._rule(date(2024, 5, 2)), date(2024, 5, 1))

    def test_disabled_never_due(self):
        assert not is_rule_due(self._rule(date(2024, 1, 1), enabled=False), date(2024, 5, 1))
