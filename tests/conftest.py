"""Pytest configuration and shared fixtures."""

import pytest

from runway.analysis import StrategyParameters
from runway.config import Settings


@pytest.fixture
def base_params():
    """6000 units, 1000 sold at once, 3-month TWAP at $3200, $17.5M/yr spend."""
    return StrategyParameters(
        total_units=6000,
        immediate_units=1000,
        unit_price=3200,
        monthly_spend=1458333.33,
        twap_period_months=3,
        minimum_safe_balance=2_000_000,
        annual_volatility=0.45,
    )


@pytest.fixture
def settings():
    """Settings with Redis disabled so the cache stays in memory."""
    return Settings(redis_url="", _env_file=None)
