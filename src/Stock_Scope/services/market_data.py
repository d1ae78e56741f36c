"""Quote provider backed by yfinance: price history, latest bar, ticker search.

All yfinance calls are synchronous and wrapped in ``asyncio.to_thread()`` to
avoid blocking the event loop. Results are converted to ``Bar``/``Series``
models before returning. Requests are rate-limited and bounded by a timeout;
a failed request is surfaced once as ``DataSourceUnavailableError``.

An empty history is not an error: it becomes an empty ``Series``.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Final

import pandas as pd
import yfinance as yf  # type: ignore[import-untyped]

from Stock_Scope.models.enums import TemporalScope, resolve_scope
from Stock_Scope.models.market_data import Bar
from Stock_Scope.models.series import Series
from Stock_Scope.services._helpers import (
    EXTERNAL_CALL_TIMEOUT_SECONDS,
    YFINANCE_SOURCE,
    fetch_once,
    safe_float,
    safe_int,
)
from Stock_Scope.services.rate_limiter import RateLimiter
from Stock_Scope.utils.exceptions import DataSourceUnavailableError, TickerNotFoundError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_INTERVAL: Final[str] = TemporalScope.ONE_DAY.value
DEFAULT_RANGE: Final[str] = TemporalScope.SIX_MONTHS.value

# Short lookback so weekends and holidays still yield a last bar
LATEST_QUOTE_PERIOD: Final[str] = "5d"

MAX_SEARCH_RESULTS: Final[int] = 10

# yfinance column name mapping (yfinance returns title-cased columns)
OHLCV_COLUMN_MAP: Final[dict[str, str]] = {
    "Open": "open",
    "High": "high",
    "Low": "low",
    "Close": "close",
    "Volume": "volume",
}


class MarketDataService:
    """Async quote provider backed by yfinance.

    Usage::

        service = MarketDataService(rate_limiter=RateLimiter())

        series = await service.fetch_series("AAPL", "1d", "6mo")
        july = await service.fetch_series_range("AAPL", start, end)
        latest = await service.fetch_latest("AAPL")
        symbols = await service.search("apple")
    """

    def __init__(
        self,
        rate_limiter: RateLimiter,
        *,
        timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
        strict_scopes: bool = False,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._timeout = timeout
        self._strict_scopes = strict_scopes

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_series(
        self,
        symbol: str,
        interval: str = DEFAULT_INTERVAL,
        range: str = DEFAULT_RANGE,  # noqa: A002
    ) -> Series:
        """Fetch bars for *symbol* at *interval* over the trailing *range*.

        Args:
            symbol: Ticker symbol (e.g., ``"AAPL"``).
            interval: Bar size token (``TemporalScope`` or provider string).
            range: Lookback token (``TemporalScope`` or provider string).

        Returns:
            A chronologically ordered ``Series``; empty if yfinance has no rows.

        Raises:
            ValueError: If strict scopes are enabled and a token is unknown.
            DataSourceUnavailableError: If yfinance fails or times out.
        """
        symbol = symbol.upper().strip()
        interval_token = resolve_scope(interval, strict=self._strict_scopes)
        range_token = resolve_scope(range, strict=self._strict_scopes)

        raw_df = await fetch_once(
            lambda: self._fetch_raw_history(symbol, period=range_token, interval=interval_token),
            rate_limiter=self._rate_limiter,
            ticker=symbol,
            source=YFINANCE_SOURCE,
            label=f"History({symbol}, {interval_token}, {range_token})",
            timeout=self._timeout,
        )

        series = self._dataframe_to_series(raw_df, symbol)
        logger.info(
            "Fetched %d bars for %s (interval=%s, range=%s)",
            len(series),
            symbol,
            interval_token,
            range_token,
        )
        return series

    async def fetch_series_range(
        self,
        symbol: str,
        start: datetime.datetime,
        end: datetime.datetime,
        interval: str = DEFAULT_INTERVAL,
    ) -> Series:
        """Fetch bars for *symbol* between two UTC instants.

        Naive datetimes are taken to be UTC.

        Raises:
            ValueError: If *start* is after *end*.
            DataSourceUnavailableError: If yfinance fails or times out.
        """
        symbol = symbol.upper().strip()
        start_utc = _as_utc(start)
        end_utc = _as_utc(end)
        if start_utc > end_utc:
            raise ValueError(f"start {start_utc.isoformat()} is after end {end_utc.isoformat()}")
        interval_token = resolve_scope(interval, strict=self._strict_scopes)

        raw_df = await fetch_once(
            lambda: self._fetch_raw_history(
                symbol, start=start_utc, end=end_utc, interval=interval_token
            ),
            rate_limiter=self._rate_limiter,
            ticker=symbol,
            source=YFINANCE_SOURCE,
            label=f"History({symbol}, {start_utc.date()}..{end_utc.date()})",
            timeout=self._timeout,
        )

        series = self._dataframe_to_series(raw_df, symbol)
        logger.info(
            "Fetched %d bars for %s between %s and %s",
            len(series),
            symbol,
            start_utc.isoformat(),
            end_utc.isoformat(),
        )
        return series

    async def fetch_latest(self, symbol: str) -> Bar:
        """Fetch the most recent daily bar for *symbol*.

        Raises:
            TickerNotFoundError: If yfinance returns no rows.
            DataSourceUnavailableError: If yfinance fails or times out.
        """
        symbol = symbol.upper().strip()

        raw_df = await fetch_once(
            lambda: self._fetch_raw_history(
                symbol, period=LATEST_QUOTE_PERIOD, interval=TemporalScope.ONE_DAY.value
            ),
            rate_limiter=self._rate_limiter,
            ticker=symbol,
            source=YFINANCE_SOURCE,
            label=f"Latest({symbol})",
            timeout=self._timeout,
        )

        latest = self._dataframe_to_series(raw_df, symbol).last()
        if latest is None:
            raise TickerNotFoundError(
                f"No recent quote returned for ticker '{symbol}'",
                ticker=symbol,
                source=YFINANCE_SOURCE,
            )
        logger.info("Fetched latest bar for %s: close=%.2f", symbol, latest.close)
        return latest

    async def search(self, query: str) -> list[str]:
        """Return ticker symbols matching a company name or symbol *query*.

        Raises:
            DataSourceUnavailableError: If the yfinance search fails or times out.
        """
        query = query.strip()
        if not query:
            return []

        raw_quotes = await fetch_once(
            lambda: self._fetch_raw_search(query),
            rate_limiter=self._rate_limiter,
            ticker=query,
            source=YFINANCE_SOURCE,
            label=f"Search({query})",
            timeout=self._timeout,
        )

        symbols = [
            str(item["symbol"])
            for item in raw_quotes
            if isinstance(item, dict) and item.get("symbol")
        ]
        logger.info("Search for '%s' returned %d symbols", query, len(symbols))
        return symbols

    # ------------------------------------------------------------------
    # Raw yfinance calls (sync, wrapped in asyncio.to_thread)
    # ------------------------------------------------------------------

    async def _fetch_raw_history(
        self,
        symbol: str,
        *,
        interval: str,
        period: str | None = None,
        start: datetime.datetime | None = None,
        end: datetime.datetime | None = None,
    ) -> pd.DataFrame:
        """Fetch raw price history from yfinance in a thread."""

        def _sync_fetch() -> pd.DataFrame:
            ticker = yf.Ticker(symbol)
            if period is not None:
                df: pd.DataFrame = ticker.history(period=period, interval=interval)
            else:
                df = ticker.history(start=start, end=end, interval=interval)
            return df

        return await asyncio.to_thread(_sync_fetch)

    async def _fetch_raw_search(self, query: str) -> list[dict[str, object]]:
        """Run a yfinance ticker search in a thread."""

        def _sync_search() -> list[dict[str, object]]:
            result = yf.Search(query, max_results=MAX_SEARCH_RESULTS)
            quotes: list[dict[str, object]] = list(result.quotes or [])
            return quotes

        return await asyncio.to_thread(_sync_search)

    # ------------------------------------------------------------------
    # Conversion helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _dataframe_to_series(df: pd.DataFrame | None, symbol: str) -> Series:
        """Convert a yfinance history DataFrame to a ``Series``.

        yfinance uses a timezone-aware DatetimeIndex; each index value becomes
        the bar's epoch-seconds timestamp. Rows with missing or non-numeric
        prices are skipped.

        Raises:
            DataSourceUnavailableError: If a non-empty frame lacks OHLCV columns.
        """
        if df is None or df.empty:
            logger.info("No history rows returned for %s", symbol)
            return Series(symbol=symbol)

        missing = set(OHLCV_COLUMN_MAP) - set(df.columns)
        if missing:
            raise DataSourceUnavailableError(
                f"Missing columns in OHLCV data for {symbol}: {sorted(missing)}",
                ticker=symbol,
                source=YFINANCE_SOURCE,
            )

        bars: list[Bar] = []
        for idx, row in df.iterrows():
            prices = [safe_float(row[column]) for column in ("Open", "High", "Low", "Close")]
            if any(price is None for price in prices):
                logger.warning("Skipping malformed OHLCV row for %s at %s", symbol, idx)
                continue
            open_, high, low, close = prices

            stamp = pd.Timestamp(idx)
            if stamp.tzinfo is None:
                stamp = stamp.tz_localize("UTC")

            bars.append(
                Bar(
                    timestamp=int(stamp.timestamp()),
                    open=open_,
                    high=high,
                    low=low,
                    close=close,
                    volume=safe_int(row["Volume"]),
                )
            )

        return Series(symbol=symbol, bars=tuple(bars))


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _as_utc(moment: datetime.datetime) -> datetime.datetime:
    """Return *moment* as an aware UTC datetime (naive values are taken as UTC)."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=datetime.UTC)
    return moment.astimezone(datetime.UTC)
