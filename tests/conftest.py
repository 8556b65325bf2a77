"""Shared test fixtures for hisaab."""

import os
import sys
import tempfile
from datetime import date

import pytest
from loguru import logger

from hisaab.financial.ledger import InMemoryLedger
from hisaab.financial.models import (
    Asset,
    Dividend,
    Liability,
    LiabilityPaymentRule,
    Transaction,
)


@pytest.fixture
def tmp_dir():
    """Provide a temporary directory that is cleaned up after the test."""
    with tempfile.TemporaryDirectory() as d:
        yield d


@pytest.fixture
def tmp_config_file(tmp_dir):
    """Create a temporary YAML config file."""
    import yaml

    config_data = {
        "paths": {
            "data_dir": tmp_dir,
            "ledger_file": os.path.join(tmp_dir, "ledger.yaml"),
        },
        "prices": {"refresh_delay_seconds": 0.5},
    }
    config_path = os.path.join(tmp_dir, "config.yaml")
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture(autouse=True)
def _restore_logger():
    """CLI tests reconfigure loguru against captured streams; put stderr back."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")


@pytest.fixture
def sample_ledger():
    """A small portfolio: one dividend stock, a savings account, a loan with a rule."""
    return InMemoryLedger(
        assets=[
            Asset(id=1, name="Acme Corp", type="investment", symbol="ACME", quantity="3", value="480"),
            Asset(id=2, name="Savings", type="bank", value="5000"),
        ],
        transactions=[
            Transaction(id=1, asset_id=1, type="buy", date=date(2024, 1, 10), quantity="10", price_per_share="100"),
            Transaction(id=2, asset_id=1, type="buy", date=date(2024, 2, 10), quantity="5", price_per_share="120"),
            Transaction(id=3, asset_id=1, type="sell", date=date(2024, 3, 10), quantity="12", price_per_share="150"),
        ],
        dividends=[
            Dividend(id=1, asset_id=1, ex_date=date(2024, 2, 1), amount="0.50"),
            Dividend(id=2, asset_id=1, ex_date=date(2024, 5, 1), amount="0.50"),
        ],
        liabilities=[
            Liability(id=1, name="Car loan", balance="10000", interest_rate="12"),
        ],
        payment_rules=[
            LiabilityPaymentRule(
                id=1,
                liability_id=1,
                frequency="monthly",
                formula_expression="200",
                next_execution_date=date(2024, 1, 15),
            ),
        ],
    )
