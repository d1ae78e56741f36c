"""Compose a ``Series`` and its derived analytics into a ``SeriesReport``.

Pure composition: every number comes from ``Stock_Scope.analysis``. An empty
series short-circuits to a report with ``has_data == False`` before any
computation runs.
"""

from __future__ import annotations

import logging

from Stock_Scope.analysis.returns import price_change, total_return
from Stock_Scope.analysis.stats import compute_series_stats
from Stock_Scope.models.market_data import Bar
from Stock_Scope.models.report import BoundaryBar, SeriesReport
from Stock_Scope.models.series import Series

logger = logging.getLogger(__name__)


def _boundary(bar: Bar | None) -> BoundaryBar | None:
    if bar is None:
        return None
    return BoundaryBar(date=Series.formatted_date(bar), bar=bar)


def build_series_report(series: Series, *, window: int | None = None) -> SeriesReport:
    """Summarize *series* for display.

    Args:
        series: The series to summarize.
        window: If given, stats cover only the last *window* bars; otherwise
            the full series. Boundary bars and returns always use the full
            series.

    Returns:
        A ``SeriesReport``. For an empty series all derived fields are None.
    """
    if series.is_empty():
        logger.info("No bars for %s; building empty report", series.symbol)
        return SeriesReport(symbol=series.symbol, data_points=0, stats_window=window)

    return SeriesReport(
        symbol=series.symbol,
        data_points=series.length(),
        first=_boundary(series.first()),
        last=_boundary(series.last()),
        stats=compute_series_stats(series, window=window),
        stats_window=window,
        total_return=total_return(series),
        daily_change=price_change(series),
    )
