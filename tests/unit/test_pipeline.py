"""Tests for run_analysis(): history first, optional sections degrade independently."""

from __future__ import annotations

import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from Stock_Scope.models import Bar, InsiderTrade, Series
from Stock_Scope.pipeline import run_analysis
from Stock_Scope.services.insider_trades import InsiderTradeService
from Stock_Scope.services.market_data import MarketDataService
from Stock_Scope.utils.exceptions import DataSourceUnavailableError, TickerNotFoundError


@pytest.fixture()
def market_data(sample_series: Series, sample_bar: Bar) -> MagicMock:
    """MarketDataService double whose fetches all succeed."""
    service = MagicMock(spec=MarketDataService)
    service.fetch_series = AsyncMock(return_value=sample_series)
    service.fetch_series_range = AsyncMock(return_value=sample_series.window(2))
    service.fetch_latest = AsyncMock(return_value=sample_bar)
    service.search = AsyncMock(return_value=["AAPL", "APLE"])
    return service


@pytest.fixture()
def insider_service(sample_insider_trade: InsiderTrade) -> MagicMock:
    service = MagicMock(spec=InsiderTradeService)
    service.fetch_trades = AsyncMock(return_value=[sample_insider_trade])
    return service


class TestRunAnalysis:
    """Tests for run_analysis()."""

    @pytest.mark.asyncio()
    async def test_happy_path(self, market_data: MagicMock, sample_bar: Bar) -> None:
        run = await run_analysis("aapl", market_data=market_data, interval="1d", range="6mo")

        assert run.symbol == "AAPL"
        assert run.history.data_points == 5
        assert run.history.stats_window is None
        assert run.recent.stats_window == 30
        assert run.recent.stats is not None
        assert run.recent.stats.data_points == 5
        assert run.latest == sample_bar
        assert run.search_results == ["AAPL", "APLE"]
        assert run.range_report is None
        assert run.insider_trades is None
        assert run.insider_error is None
        market_data.fetch_series.assert_awaited_once_with("AAPL", "1d", "6mo")
        market_data.fetch_series_range.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_window_applies_to_recent_only(self, market_data: MagicMock) -> None:
        run = await run_analysis("AAPL", market_data=market_data, window=2)
        assert run.recent.stats is not None
        assert run.recent.stats.data_points == 2
        assert run.history.stats is not None
        assert run.history.stats.data_points == 5

    @pytest.mark.asyncio()
    async def test_history_failure_propagates(self, market_data: MagicMock) -> None:
        market_data.fetch_series.side_effect = DataSourceUnavailableError(
            "down", ticker="AAPL", source="yfinance"
        )
        with pytest.raises(DataSourceUnavailableError, match="down"):
            await run_analysis("AAPL", market_data=market_data)

        market_data.fetch_latest.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_optional_failures_degrade(
        self, market_data: MagicMock, insider_service: MagicMock
    ) -> None:
        market_data.fetch_latest.side_effect = TickerNotFoundError(
            "No recent quote", ticker="AAPL", source="yfinance"
        )
        insider_service.fetch_trades.side_effect = DataSourceUnavailableError(
            "HTTP 503", ticker="AAPL", source="openinsider", http_status=503
        )

        run = await run_analysis(
            "AAPL", market_data=market_data, insider_service=insider_service
        )

        assert run.latest is None
        assert run.latest_error == "No recent quote"
        assert run.insider_trades is None
        assert run.insider_error == "HTTP 503"
        assert run.search_results == ["AAPL", "APLE"]
        assert run.history.has_data

    @pytest.mark.asyncio()
    async def test_insiders_included(
        self, market_data: MagicMock, insider_service: MagicMock
    ) -> None:
        run = await run_analysis(
            "AAPL", market_data=market_data, insider_service=insider_service
        )
        assert run.insider_trades is not None
        assert len(run.insider_trades) == 1
        insider_service.fetch_trades.assert_awaited_once_with("AAPL")

    @pytest.mark.asyncio()
    async def test_custom_range(self, market_data: MagicMock) -> None:
        start = datetime.datetime(2025, 1, 1, tzinfo=datetime.UTC)
        end = datetime.datetime(2025, 2, 1, tzinfo=datetime.UTC)
        run = await run_analysis(
            "AAPL",
            market_data=market_data,
            interval="1h",
            range_start=start,
            range_end=end,
        )
        assert run.range_report is not None
        assert run.range_report.data_points == 2
        assert run.range_start == start
        market_data.fetch_series_range.assert_awaited_once_with("AAPL", start, end, interval="1h")

    @pytest.mark.asyncio()
    async def test_custom_range_failure_degrades(self, market_data: MagicMock) -> None:
        market_data.fetch_series_range.side_effect = ValueError("start is after end")
        start = datetime.datetime(2025, 2, 1, tzinfo=datetime.UTC)
        end = datetime.datetime(2025, 1, 1, tzinfo=datetime.UTC)
        run = await run_analysis(
            "AAPL", market_data=market_data, range_start=start, range_end=end
        )
        assert run.range_report is None
        assert run.range_error == "ValueError: start is after end"

    @pytest.mark.asyncio()
    async def test_half_open_range_rejected(self, market_data: MagicMock) -> None:
        with pytest.raises(ValueError, match="together"):
            await run_analysis(
                "AAPL",
                market_data=market_data,
                range_start=datetime.datetime(2025, 1, 1, tzinfo=datetime.UTC),
            )

    @pytest.mark.asyncio()
    async def test_blank_symbol_rejected(self, market_data: MagicMock) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            await run_analysis("   ", market_data=market_data)
        market_data.fetch_series.assert_not_called()

    @pytest.mark.asyncio()
    async def test_empty_history(self, market_data: MagicMock) -> None:
        market_data.fetch_series.return_value = Series(symbol="AAPL")
        run = await run_analysis("AAPL", market_data=market_data)
        assert run.history.has_data is False
        assert run.recent.has_data is False
