"""Percentage return calculations over a window of bars.

Both functions use whatever window the caller passes in: the first and last
elements for the total return, the last two for the latest change.

A zero reference close follows IEEE-754 division: ``+inf`` or ``-inf`` by the
sign of the move times the sign of the zero (``-0.0`` flips it), ``nan`` when
there is no move. Python raises on float division by zero, so the special
values are produced explicitly.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from Stock_Scope.models.enums import TrendDirection
from Stock_Scope.models.market_data import Bar, PriceChange
from Stock_Scope.models.series import Series

logger = logging.getLogger(__name__)

MIN_BARS_FOR_RETURN: int = 2


def _as_bars(data: Series | Sequence[Bar]) -> Sequence[Bar]:
    return data.bars if isinstance(data, Series) else data


def _percent_change(reference: float, current: float) -> float:
    """``(current - reference) / reference * 100`` with IEEE zero handling."""
    change = current - reference
    if reference == 0.0:
        logger.warning("Zero reference close; percentage change is not finite")
        if change == 0.0 or math.isnan(change):
            return math.nan
        return math.copysign(math.inf, change) * math.copysign(1.0, reference)
    return change / reference * 100


def total_return(data: Series | Sequence[Bar]) -> float | None:
    """Percentage return from the first to the last close of *data*.

    Returns:
        ``(last.close - first.close) / first.close * 100``, or None with fewer
        than two bars.
    """
    bars = _as_bars(data)
    if len(bars) < MIN_BARS_FOR_RETURN:
        return None
    return _percent_change(bars[0].close, bars[-1].close)


def price_change(data: Series | Sequence[Bar]) -> PriceChange | None:
    """Change between the last two closes of *data*, or None with fewer than two bars."""
    bars = _as_bars(data)
    if len(bars) < MIN_BARS_FOR_RETURN:
        return None

    previous_close = bars[-2].close
    latest_close = bars[-1].close
    change = latest_close - previous_close

    if change > 0:
        direction = TrendDirection.UP
    elif change < 0:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.FLAT

    return PriceChange(
        previous_close=previous_close,
        latest_close=latest_close,
        change=change,
        change_percent=_percent_change(previous_close, latest_close),
        direction=direction,
    )
