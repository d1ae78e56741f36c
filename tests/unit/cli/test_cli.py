"""Tests for the CLI entry point (typer app).

Validates that subcommands are registered, that options are parsed and
forwarded, and that commands render results or exit with code 1 on provider
failures. All external dependencies are mocked.
"""

from __future__ import annotations

import datetime
import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from Stock_Scope.cli import app
from Stock_Scope.models import Bar, HealthStatus, InsiderTrade, Series
from Stock_Scope.services.health import HealthService
from Stock_Scope.services.insider_trades import InsiderTradeService
from Stock_Scope.services.market_data import MarketDataService
from Stock_Scope.utils.exceptions import DataSourceUnavailableError, TickerNotFoundError

runner = CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep STOCK_SCOPE_* variables from the host out of the tests."""
    for name in ("INTERVAL", "RANGE", "WINDOW", "FETCH_TIMEOUT", "STRICT_SCOPES", "INSIDER_URL"):
        monkeypatch.delenv(f"STOCK_SCOPE_{name}", raising=False)


# ---------------------------------------------------------------------------
# Command registration
# ---------------------------------------------------------------------------


class TestCommandRegistration:
    """Tests that all expected commands are registered on the app."""

    @pytest.mark.parametrize(
        "command", ["analyze", "history", "quote", "search", "insiders", "health"]
    )
    def test_command_help(self, command: str) -> None:
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0

    def test_root_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("analyze", "history", "quote", "search", "insiders", "health"):
            assert command in result.output


# ---------------------------------------------------------------------------
# Argument handling (asyncio.run mocked)
# ---------------------------------------------------------------------------


class TestArgumentHandling:
    """Option parsing happens before the async body runs."""

    def test_analyze_invokes_asyncio_run(self) -> None:
        with patch("Stock_Scope.cli.asyncio.run") as mock_run:
            result = runner.invoke(app, ["analyze", "AAPL"])
        assert result.exit_code == 0
        mock_run.assert_called_once()
        mock_run.call_args.args[0].close()

    def test_analyze_rejects_half_range(self) -> None:
        with patch("Stock_Scope.cli.asyncio.run") as mock_run:
            result = runner.invoke(app, ["analyze", "AAPL", "--start", "2025-01-01"])
        assert result.exit_code != 0
        mock_run.assert_not_called()

    def test_analyze_rejects_bad_date(self) -> None:
        with patch("Stock_Scope.cli.asyncio.run") as mock_run:
            result = runner.invoke(
                app, ["analyze", "AAPL", "--start", "01/01/2025", "--end", "2025-02-01"]
            )
        assert result.exit_code != 0
        mock_run.assert_not_called()

    def test_analyze_rejects_unknown_format(self) -> None:
        result = runner.invoke(app, ["analyze", "AAPL", "--format", "xml"])
        assert result.exit_code != 0

    def test_negative_window_rejected(self) -> None:
        result = runner.invoke(app, ["history", "AAPL", "--window", "-1"])
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# Commands end to end with mocked services
# ---------------------------------------------------------------------------


class TestHistoryCommand:
    """Tests for the history command."""

    def test_terminal_output(self, sample_series: Series) -> None:
        with patch.object(
            MarketDataService, "fetch_series", new_callable=AsyncMock, return_value=sample_series
        ) as mock_fetch:
            result = runner.invoke(app, ["history", "aapl", "--range", "1mo"])

        assert result.exit_code == 0, result.output
        assert "AAPL" in result.output
        assert "107.40" in result.output
        mock_fetch.assert_awaited_once_with("AAPL", "1d", "1mo")

    def test_json_output(self, sample_series: Series) -> None:
        with patch.object(
            MarketDataService, "fetch_series", new_callable=AsyncMock, return_value=sample_series
        ):
            result = runner.invoke(
                app, ["history", "AAPL", "--format", "json", "--window", "2", "-q"]
            )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["symbol"] == "AAPL"
        assert payload["stats"]["data_points"] == 2
        assert payload["has_data"] is True

    def test_empty_series(self, empty_series: Series) -> None:
        with patch.object(
            MarketDataService, "fetch_series", new_callable=AsyncMock, return_value=empty_series
        ):
            result = runner.invoke(app, ["history", "AAPL"])

        assert result.exit_code == 0
        assert "No OHLC data available for AAPL" in result.output

    def test_provider_failure_exits_1(self) -> None:
        with patch.object(
            MarketDataService,
            "fetch_series",
            new_callable=AsyncMock,
            side_effect=DataSourceUnavailableError("down", ticker="AAPL", source="yfinance"),
        ):
            result = runner.invoke(app, ["history", "AAPL"])

        assert result.exit_code == 1
        assert "down" in result.output

    def test_env_defaults_used(
        self, monkeypatch: pytest.MonkeyPatch, sample_series: Series
    ) -> None:
        monkeypatch.setenv("STOCK_SCOPE_INTERVAL", "1wk")
        monkeypatch.setenv("STOCK_SCOPE_RANGE", "1y")
        with patch.object(
            MarketDataService, "fetch_series", new_callable=AsyncMock, return_value=sample_series
        ) as mock_fetch:
            result = runner.invoke(app, ["history", "AAPL"])

        assert result.exit_code == 0, result.output
        mock_fetch.assert_awaited_once_with("AAPL", "1wk", "1y")


class TestAnalyzeCommand:
    """Tests for the analyze command."""

    def _patches(self, sample_series: Series, sample_bar: Bar) -> list[object]:
        return [
            patch.object(
                MarketDataService,
                "fetch_series",
                new_callable=AsyncMock,
                return_value=sample_series,
            ),
            patch.object(
                MarketDataService, "fetch_latest", new_callable=AsyncMock, return_value=sample_bar
            ),
            patch.object(
                MarketDataService, "search", new_callable=AsyncMock, return_value=["AAPL"]
            ),
        ]

    def test_terminal(self, sample_series: Series, sample_bar: Bar) -> None:
        p1, p2, p3 = self._patches(sample_series, sample_bar)
        with p1, p2, p3:  # type: ignore[attr-defined]
            result = runner.invoke(app, ["analyze", "AAPL", "--window", "3"])

        assert result.exit_code == 0, result.output
        assert "Stock Analysis Report" in result.output
        assert "Last 3 Bars" in result.output

    def test_json(self, sample_series: Series, sample_bar: Bar) -> None:
        p1, p2, p3 = self._patches(sample_series, sample_bar)
        with p1, p2, p3:  # type: ignore[attr-defined]
            result = runner.invoke(app, ["analyze", "AAPL", "--format", "json", "-q"])

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload["symbol"] == "AAPL"
        assert payload["history"]["data_points"] == 5
        assert payload["search_results"] == ["AAPL"]

    def test_markdown_saves_report(
        self, sample_series: Series, sample_bar: Bar, tmp_path: Path
    ) -> None:
        p1, p2, p3 = self._patches(sample_series, sample_bar)
        with p1, p2, p3:  # type: ignore[attr-defined]
            result = runner.invoke(
                app,
                ["analyze", "AAPL", "--format", "markdown", "--output-dir", str(tmp_path)],
            )

        assert result.exit_code == 0, result.output
        assert "Report saved to" in result.output
        assert list(tmp_path.glob("AAPL_*_analysis.md"))

    def test_insiders_flag(
        self, sample_series: Series, sample_bar: Bar, sample_insider_trade: InsiderTrade
    ) -> None:
        p1, p2, p3 = self._patches(sample_series, sample_bar)
        with (
            p1,  # type: ignore[attr-defined]
            p2,  # type: ignore[attr-defined]
            p3,  # type: ignore[attr-defined]
            patch.object(
                InsiderTradeService,
                "fetch_trades",
                new_callable=AsyncMock,
                return_value=[sample_insider_trade],
            ) as mock_trades,
        ):
            result = runner.invoke(app, ["analyze", "AAPL", "--insiders"])

        assert result.exit_code == 0, result.output
        assert "Timothy Cook" in result.output
        mock_trades.assert_awaited_once_with("AAPL")

    def test_custom_range_end_date_inclusive(
        self, sample_series: Series, sample_bar: Bar
    ) -> None:
        p1, p2, p3 = self._patches(sample_series, sample_bar)
        with (
            p1,  # type: ignore[attr-defined]
            p2,  # type: ignore[attr-defined]
            p3,  # type: ignore[attr-defined]
            patch.object(
                MarketDataService,
                "fetch_series_range",
                new_callable=AsyncMock,
                return_value=sample_series,
            ) as mock_range,
        ):
            result = runner.invoke(
                app, ["analyze", "AAPL", "--start", "2024-07-01", "--end", "2024-07-31"]
            )

        assert result.exit_code == 0, result.output
        _, start, end = mock_range.call_args.args
        assert start == datetime.datetime(2024, 7, 1, tzinfo=datetime.UTC)
        assert end == datetime.datetime(2024, 7, 31, 23, 59, 59, tzinfo=datetime.UTC)
        assert "2024-07-01 to 2024-07-31" in result.output

    def test_strict_rejects_unknown_token(self) -> None:
        result = runner.invoke(app, ["analyze", "AAPL", "--range", "5d", "--strict"])
        assert result.exit_code == 1
        assert "Unknown interval/range token" in result.output

    def test_history_failure_exits_1(self) -> None:
        with patch.object(
            MarketDataService,
            "fetch_series",
            new_callable=AsyncMock,
            side_effect=DataSourceUnavailableError("down", ticker="AAPL", source="yfinance"),
        ):
            result = runner.invoke(app, ["analyze", "AAPL"])

        assert result.exit_code == 1


class TestQuoteSearchInsiders:
    """Tests for quote, search and insiders commands."""

    def test_quote(self, sample_bar: Bar) -> None:
        with patch.object(
            MarketDataService, "fetch_latest", new_callable=AsyncMock, return_value=sample_bar
        ):
            result = runner.invoke(app, ["quote", "AAPL"])

        assert result.exit_code == 0, result.output
        assert "186.75" in result.output

    def test_quote_not_found(self) -> None:
        with patch.object(
            MarketDataService,
            "fetch_latest",
            new_callable=AsyncMock,
            side_effect=TickerNotFoundError("No recent quote", ticker="ZZZZ", source="yfinance"),
        ):
            result = runner.invoke(app, ["quote", "ZZZZ"])

        assert result.exit_code == 1
        assert "No recent quote" in result.output

    def test_search_limit(self) -> None:
        symbols = ["AAPL", "APLE", "APLD", "AAPB", "AAPU", "AAPD"]
        with patch.object(
            MarketDataService, "search", new_callable=AsyncMock, return_value=symbols
        ):
            result = runner.invoke(app, ["search", "apple", "--limit", "2"])

        assert result.exit_code == 0, result.output
        assert "APLE" in result.output
        assert "APLD" not in result.output
        assert "... and 4 others" in result.output

    def test_insiders(self, sample_insider_trade: InsiderTrade) -> None:
        with patch.object(
            InsiderTradeService,
            "fetch_trades",
            new_callable=AsyncMock,
            return_value=[sample_insider_trade],
        ):
            result = runner.invoke(app, ["insiders", "AAPL"])

        assert result.exit_code == 0, result.output
        assert "Timothy Cook" in result.output

    def test_insiders_failure_exits_1(self) -> None:
        with patch.object(
            InsiderTradeService,
            "fetch_trades",
            new_callable=AsyncMock,
            side_effect=DataSourceUnavailableError(
                "HTTP 503", ticker="AAPL", source="openinsider", http_status=503
            ),
        ):
            result = runner.invoke(app, ["insiders", "AAPL"])

        assert result.exit_code == 1


class TestHealthCommand:
    """Tests for the health command."""

    def test_health(self, sample_health_status: HealthStatus) -> None:
        with patch.object(
            HealthService,
            "check_all",
            new_callable=AsyncMock,
            return_value=sample_health_status,
        ):
            result = runner.invoke(app, ["health"])

        assert result.exit_code == 0, result.output
        assert "Yahoo Finance" in result.output
        assert "OpenInsider" in result.output
