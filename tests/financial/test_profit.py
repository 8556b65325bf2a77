"""Tests for hisaab.financial.calculators.profit."""

from datetime import date
from decimal import Decimal

import pytest

from hisaab.financial.calculators.profit import (
    calculate_assets_profit,
    calculate_profit,
    replay_fifo,
    sort_chronologically,
)
from hisaab.financial.models import Asset, Dividend, Transaction


def _txn(id, type, day, qty, price, asset_id=1):
    return Transaction(id=id, asset_id=asset_id, type=type, date=day, quantity=qty, price_per_share=price)


@pytest.fixture
def fifo_trades():
    """Buys 10@100 and 5@120, then sells 12@150."""
    return [
        _txn(1, "buy", date(2024, 1, 10), "10", "100"),
        _txn(2, "buy", date(2024, 2, 10), "5", "120"),
        _txn(3, "sell", date(2024, 3, 10), "12", "150"),
    ]


@pytest.fixture
def acme():
    return Asset(id=1, name="Acme", type="investment", symbol="ACME", quantity="3", value="480")


class TestFifoReplay:
    def test_realized_gain_across_lots(self, fifo_trades):
        state = replay_fifo(fifo_trades)
        # 10 x (150 - 100) + 2 x (150 - 120)
        assert state.realized_gain == Decimal("560")
        assert state.total_shares == Decimal("3")

    def test_partial_lot_keeps_remaining_shares(self, fifo_trades):
        state = replay_fifo(fifo_trades)
        assert len(state.lots) == 1
        assert state.lots[0].shares == Decimal("3")
        assert state.lots[0].price_per_share == Decimal("120")
        assert state.remaining_cost == Decimal("360")

    def test_oversell_leaves_excess_unmatched(self):
        trades = [
            _txn(1, "buy", date(2024, 1, 1), "5", "10"),
            _txn(2, "sell", date(2024, 2, 1), "8", "20"),
        ]
        state = replay_fifo(trades)
        # Only the 5 held shares realize a gain; the other 3 match nothing.
        assert state.realized_gain == Decimal("50")
        assert state.unmatched_shares == Decimal("3")
        assert state.total_shares == Decimal("-3")
        assert not state.lots

    def test_sort_is_stable_for_same_day(self):
        same_day = date(2024, 1, 1)
        trades = [_txn(2, "buy", same_day, "1", "10"), _txn(1, "buy", same_day, "1", "20")]
        assert [t.id for t in sort_chronologically(trades)] == [2, 1]


class TestCalculateProfit:
    def test_fifo_snapshot(self, acme, fifo_trades):
        result = calculate_profit(acme, fifo_trades, [])

        assert result.total_shares == Decimal("3")
        assert result.total_cost == Decimal("360")
        assert result.avg_cost_basis == Decimal("120")
        assert result.current_price == Decimal("160")
        assert result.current_value == Decimal("480")
        assert result.unrealized_gain == Decimal("120")
        assert result.realized_gain == Decimal("560")
        assert result.dividend_income == 0
        assert result.total_gain == Decimal("680")
        assert round(result.gain_percentage, 2) == Decimal("188.89")
        assert result.has_transactions is True

    def test_input_order_does_not_matter(self, acme, fifo_trades):
        newest_first = list(reversed(fifo_trades))
        assert calculate_profit(acme, newest_first, []) == calculate_profit(acme, fifo_trades, [])

    def test_idempotent(self, acme, fifo_trades):
        divs = [Dividend(id=1, asset_id=1, ex_date=date(2024, 2, 1), amount="0.5")]
        first = calculate_profit(acme, fifo_trades, divs)
        second = calculate_profit(acme, fifo_trades, divs)
        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_dividends_included_in_total_gain(self, acme, fifo_trades):
        divs = [
            Dividend(id=1, asset_id=1, ex_date=date(2024, 2, 1), amount="0.50"),  # 10 shares held
            Dividend(id=2, asset_id=1, ex_date=date(2024, 5, 1), amount="0.50"),  # 3 shares held
        ]
        result = calculate_profit(acme, fifo_trades, divs)
        assert result.dividend_income == Decimal("6.50")
        assert result.total_gain == Decimal("686.50")

    def test_no_dividend_income_without_symbol(self, fifo_trades):
        asset = Asset(id=1, name="Private fund", type="investment", quantity="3", value="480")
        divs = [Dividend(id=1, asset_id=1, ex_date=date(2024, 2, 1), amount="0.50")]
        assert calculate_profit(asset, fifo_trades, divs).dividend_income == 0

    def test_fully_sold_position_reports_zero_percentage(self):
        asset = Asset(id=1, name="Acme", type="investment", symbol="ACME", quantity="0", value="0")
        trades = [
            _txn(1, "buy", date(2024, 1, 1), "10", "100"),
            _txn(2, "sell", date(2024, 6, 1), "10", "150"),
        ]
        result = calculate_profit(asset, trades, [])
        assert result.realized_gain == Decimal("500")
        assert result.total_gain == Decimal("500")
        # No remaining cost, so the percentage stays 0 even with a realized gain.
        assert result.gain_percentage == 0
        assert result.current_price == 0
        assert result.avg_cost_basis == 0

    def test_oversell_documented_behaviour(self):
        asset = Asset(id=1, name="Acme", type="investment", symbol="ACME", quantity="0", value="0")
        trades = [
            _txn(1, "buy", date(2024, 1, 1), "5", "10"),
            _txn(2, "sell", date(2024, 2, 1), "8", "20"),
        ]
        result = calculate_profit(asset, trades, [])
        assert result.realized_gain == Decimal("50")
        assert result.total_shares == Decimal("-3")
        assert result.current_price == 0
        assert result.gain_percentage == 0


class TestNoTransactions:
    def test_price_from_value_and_quantity(self):
        asset = Asset(id=1, name="Acme", type="investment", symbol="ACME", quantity="10", value="1000")
        result = calculate_profit(asset, [], [])
        assert result.current_price == Decimal("100")
        assert result.has_transactions is False
        for field_name in (
            "total_shares",
            "avg_cost_basis",
            "current_value",
            "total_cost",
            "unrealized_gain",
            "realized_gain",
            "dividend_income",
            "total_gain",
            "gain_percentage",
        ):
            assert getattr(result, field_name) == 0

    def test_price_is_value_without_quantity(self):
        asset = Asset(id=2, name="House", type="property", value="350000")
        assert calculate_profit(asset, [], []).current_price == Decimal("350000")

    def test_price_is_value_with_zero_quantity(self):
        asset = Asset(id=2, name="Closed", type="investment", quantity="0", value="12")
        assert calculate_profit(asset, [], []).current_price == Decimal("12")


class TestAssetsProfit:
    def test_groups_records_per_asset(self, fifo_trades):
        assets = [
            Asset(id=1, name="Acme", type="investment", symbol="ACME", quantity="3", value="480"),
            Asset(id=2, name="Beta", type="investment", symbol="BETA", quantity="4", value="40"),
        ]
        trades = fifo_trades + [_txn(10, "buy", date(2024, 1, 1), "4", "5", asset_id=2)]

        results = calculate_assets_profit([1, 2, 99], assets, trades, [])

        assert set(results) == {1, 2}
        assert results[1].realized_gain == Decimal("560")
        assert results[2].unrealized_gain == Decimal("20")
