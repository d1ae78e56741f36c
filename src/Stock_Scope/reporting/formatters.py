"""Shared formatting utilities for terminal and markdown reports.

Turns prices, volumes, percentages, and trend directions into display
strings. Absent values render as ``n/a``; non-finite percentages (a zero
reference close) render as ``undefined`` so they are never mistaken for data.
"""

from __future__ import annotations

import datetime
import logging
import math

from Stock_Scope.models.enums import TrendDirection
from Stock_Scope.models.market_data import Bar

logger = logging.getLogger(__name__)

MISSING: str = "n/a"
UNDEFINED: str = "undefined"

# Ticker search hits listed before the "... and N others" line
DEFAULT_SEARCH_LIMIT: int = 5

TREND_ARROWS: dict[TrendDirection, str] = {
    TrendDirection.UP: "▲",
    TrendDirection.DOWN: "▼",
    TrendDirection.FLAT: "►",
}


def format_price(value: float | None) -> str:
    """Two-decimal price, e.g. ``186.75``."""
    if value is None:
        return MISSING
    if not math.isfinite(value):
        return UNDEFINED
    return f"{value:.2f}"


def format_volume(value: int | None) -> str:
    """Integer volume with thousands separators, e.g. ``52,340,000``."""
    if value is None:
        return MISSING
    return f"{value:,}"


def format_percent(value: float | None) -> str:
    """Signed two-decimal percentage, e.g. ``+10.00%``."""
    if value is None:
        return MISSING
    if not math.isfinite(value):
        return UNDEFINED
    return f"{value:+.2f}%"


def format_trend(direction: TrendDirection) -> str:
    """Arrow plus direction label, e.g. ``▲ up``."""
    return f"{TREND_ARROWS[direction]} {direction.value}"


def format_bar_line(date: str, bar: Bar) -> str:
    """One-line OHLCV description of a bar."""
    return (
        f"{date} - Open: {format_price(bar.open)}, High: {format_price(bar.high)}, "
        f"Low: {format_price(bar.low)}, Close: {format_price(bar.close)}, "
        f"Volume: {format_volume(bar.volume)}"
    )


def build_report_filename(
    symbol: str,
    generated_at: datetime.datetime | None = None,
    ext: str = "md",
) -> str:
    """Build a standardized report filename.

    Format: ``{SYMBOL}_{DATE}_analysis.{ext}``
    Example: ``AAPL_2025-03-15_analysis.md``
    """
    moment = generated_at or datetime.datetime.now(datetime.UTC)
    return f"{symbol.upper()}_{moment.date().isoformat()}_analysis.{ext}"
