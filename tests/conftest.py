"""Shared test fixtures for the Stock Scope test suite.

Provides realistic sample instances of the core models so tests don't
need to inline large construction blocks.
"""

import datetime
from collections.abc import Callable

import pytest

from Stock_Scope.models import (
    Bar,
    HealthStatus,
    InsiderTrade,
    Series,
    TransactionType,
)

# 2025-01-15T00:00:00Z
BASE_TIMESTAMP: int = 1_736_899_200
ONE_DAY_SECONDS: int = 86_400


def _make_bar(
    close: float,
    volume: int = 1_000_000,
    *,
    day: int = 0,
    spread: float = 1.0,
) -> Bar:
    """Build a daily bar around *close*, *day* days after ``BASE_TIMESTAMP``."""
    return Bar(
        timestamp=BASE_TIMESTAMP + day * ONE_DAY_SECONDS,
        open=close - spread / 2,
        high=close + spread,
        low=close - spread,
        close=close,
        volume=volume,
    )


@pytest.fixture()
def sample_bar() -> Bar:
    """A valid bar with realistic AAPL daily data."""
    return Bar(
        timestamp=BASE_TIMESTAMP,
        open=185.50,
        high=187.25,
        low=184.10,
        close=186.75,
        volume=52_340_000,
    )


@pytest.fixture()
def five_bars() -> list[Bar]:
    """Five consecutive daily bars with closes 102..112."""
    closes = [102.0, 105.0, 108.0, 110.0, 112.0]
    volumes = [1_000_000, 1_200_000, 900_000, 1_100_000, 1_300_000]
    return [
        _make_bar(close, volume, day=i) for i, (close, volume) in enumerate(zip(closes, volumes))
    ]


@pytest.fixture()
def sample_series(five_bars: list[Bar]) -> Series:
    """Series built from ``five_bars``."""
    return Series(symbol="AAPL", bars=tuple(five_bars))


@pytest.fixture()
def empty_series() -> Series:
    """Series with no bars."""
    return Series(symbol="AAPL")


@pytest.fixture()
def sample_insider_trade() -> InsiderTrade:
    """A normalized insider sale."""
    return InsiderTrade(
        name="Timothy Cook",
        title="CEO",
        trade_date="2025-01-10",
        transaction_type=TransactionType.SELL,
        price="186.75",
        qty="50000",
    )


@pytest.fixture()
def sample_health_status() -> HealthStatus:
    """Both data sources available."""
    return HealthStatus(
        yfinance_available=True,
        insider_source_available=True,
        last_check=datetime.datetime(2025, 1, 15, 15, 30, 0, tzinfo=datetime.UTC),
    )


@pytest.fixture()
def bar_factory() -> Callable[..., Bar]:
    """Factory for daily bars: ``bar_factory(close, volume, day=n)``."""
    return _make_bar
