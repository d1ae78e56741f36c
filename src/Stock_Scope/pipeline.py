"""End-to-end analysis of one symbol.

Fetches the price history first; without it there is nothing to analyze, so
a provider failure there propagates unchanged. The remaining sections are
independent and fetched concurrently. Each failure is degraded to an error
message on the resulting ``AnalysisRun`` rather than aborting the run.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from collections.abc import Coroutine
from typing import Any

from Stock_Scope.config import DEFAULT_INTERVAL, DEFAULT_RANGE, DEFAULT_WINDOW
from Stock_Scope.models.market_data import Bar
from Stock_Scope.models.report import AnalysisRun, SeriesReport
from Stock_Scope.models.series import Series
from Stock_Scope.reporting.assembler import build_series_report
from Stock_Scope.services.insider_trades import InsiderTradeService
from Stock_Scope.services.market_data import MarketDataService
from Stock_Scope.utils.exceptions import DataFetchError

logger = logging.getLogger(__name__)


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, DataFetchError):
        return str(exc)
    return f"{type(exc).__name__}: {exc}"


async def run_analysis(
    symbol: str,
    *,
    market_data: MarketDataService,
    interval: str = DEFAULT_INTERVAL,
    range: str = DEFAULT_RANGE,  # noqa: A002
    window: int = DEFAULT_WINDOW,
    range_start: datetime.datetime | None = None,
    range_end: datetime.datetime | None = None,
    insider_service: InsiderTradeService | None = None,
) -> AnalysisRun:
    """Fetch everything for *symbol* and assemble an ``AnalysisRun``.

    Args:
        symbol: Ticker symbol.
        market_data: Quote provider.
        interval: Bar size token for the history.
        range: Lookback token for the history.
        window: Number of trailing bars for the recent-window stats.
        range_start: Start of an optional custom date range.
        range_end: End of an optional custom date range.
        insider_service: If given, insider trades are fetched too.

    Returns:
        The assembled run. Optional sections that failed carry an error
        message instead of data.

    Raises:
        ValueError: If *symbol* is blank, only one of *range_start* /
            *range_end* is given, or *window* is negative.
        DataFetchError: If the price history cannot be fetched.
    """
    if (range_start is None) != (range_end is None):
        raise ValueError("range_start and range_end must be given together")
    if window < 0:
        raise ValueError(f"window must be non-negative, got {window}")

    symbol = symbol.upper().strip()
    if not symbol:
        raise ValueError("symbol must be a non-empty identifier")
    logger.info("Starting analysis for %s (interval=%s, range=%s)", symbol, interval, range)

    series = await market_data.fetch_series(symbol, interval, range)

    tasks: dict[str, Coroutine[Any, Any, Any]] = {
        "latest": market_data.fetch_latest(symbol),
        "search": market_data.search(symbol),
    }
    if range_start is not None and range_end is not None:
        tasks["range"] = market_data.fetch_series_range(
            symbol, range_start, range_end, interval=interval
        )
    if insider_service is not None:
        tasks["insiders"] = insider_service.fetch_trades(symbol)

    outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)
    results: dict[str, Any] = dict(zip(tasks.keys(), outcomes, strict=True))

    errors: dict[str, str] = {}
    for name, outcome in results.items():
        if isinstance(outcome, BaseException):
            logger.warning("%s section for %s failed: %s", name, symbol, outcome)
            errors[name] = _error_message(outcome)

    latest: Bar | None = None if "latest" in errors else results["latest"]
    search_results: list[str] = [] if "search" in errors else results["search"]

    range_report: SeriesReport | None = None
    if "range" in results and "range" not in errors:
        range_series: Series = results["range"]
        range_report = build_series_report(range_series)

    insider_trades = None
    if "insiders" in results and "insiders" not in errors:
        insider_trades = results["insiders"]

    run = AnalysisRun(
        symbol=symbol,
        interval=interval,
        range=range,
        window=window,
        generated_at=datetime.datetime.now(datetime.UTC),
        history=build_series_report(series),
        recent=build_series_report(series, window=window),
        latest=latest,
        latest_error=errors.get("latest"),
        range_start=range_start,
        range_end=range_end,
        range_report=range_report,
        range_error=errors.get("range"),
        search_results=search_results,
        search_error=errors.get("search"),
        insider_trades=insider_trades,
        insider_error=errors.get("insiders"),
    )
    logger.info("Analysis for %s complete: %d bars", symbol, series.length())
    return run
