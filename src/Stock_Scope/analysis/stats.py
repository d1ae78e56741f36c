"""Descriptive statistics over a collection of bars.

Pure functions: bars in, ``Stats`` (or None) out. No I/O, no mutation.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from Stock_Scope.models.market_data import Bar, Stats
from Stock_Scope.models.series import Series

logger = logging.getLogger(__name__)


def compute_stats(bars: Sequence[Bar], symbol: str = "") -> Stats | None:
    """Compute the close-price range, mean close and volume totals for *bars*.

    Price figures use the ``close`` field only, not the OHLC extremes.
    ``avg_volume`` is ``total_volume // data_points`` (integer truncation),
    never a float mean.

    Args:
        bars: Bars to aggregate. Order does not matter.
        symbol: Symbol to stamp on the result.

    Returns:
        A ``Stats`` snapshot, or None when *bars* is empty.
    """
    if not bars:
        logger.debug("No bars for %s, skipping stats", symbol or "<unnamed>")
        return None

    closes = [bar.close for bar in bars]
    data_points = len(closes)
    min_price = min(closes)
    max_price = max(closes)

    # Rounding in the float sum can land the mean a few ULPs outside the range
    avg_price = sum(closes) / data_points
    avg_price = min(max(avg_price, min_price), max_price)

    total_volume = sum(bar.volume for bar in bars)
    avg_volume = total_volume // data_points

    return Stats(
        symbol=symbol,
        min_price=min_price,
        max_price=max_price,
        avg_price=avg_price,
        total_volume=total_volume,
        avg_volume=avg_volume,
        data_points=data_points,
    )


def compute_series_stats(series: Series, window: int | None = None) -> Stats | None:
    """Compute stats over the full *series*, or over its last *window* bars.

    Raises:
        ValueError: If *window* is negative.
    """
    bars = list(series.bars) if window is None else series.last_n(window)
    return compute_stats(bars, symbol=series.symbol)
