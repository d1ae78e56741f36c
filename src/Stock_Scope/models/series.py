"""Series: an ordered OHLCV sequence for one symbol, plus its windowing views.

Bars are stored exactly as the provider delivered them (ascending by
timestamp). The series never re-sorts and never validates ordering. Every
window operation returns a fresh list (or a fresh ``Series``), so a window
never aliases the parent's storage.
"""

from __future__ import annotations

import datetime
import logging

import pandas as pd
from pydantic import BaseModel, ConfigDict, field_validator

from Stock_Scope.models.market_data import Bar

logger = logging.getLogger(__name__)

DATE_FORMAT: str = "%Y-%m-%d"


class Series(BaseModel):
    """Immutable, chronologically ordered collection of bars for one symbol.

    Usage::

        series = Series(symbol="AAPL", bars=bars)
        recent = series.last_n(30)
        first, last = series.first(), series.last()
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    bars: tuple[Bar, ...] = ()

    @field_validator("symbol")
    @classmethod
    def _symbol_not_blank(cls, value: str) -> str:
        """Reject empty or whitespace-only symbols."""
        stripped = value.strip()
        if not stripped:
            raise ValueError("symbol must be a non-empty identifier")
        return stripped

    def __len__(self) -> int:
        return len(self.bars)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return not self.bars

    def length(self) -> int:
        return len(self.bars)

    def first(self) -> Bar | None:
        """Chronologically first bar, or None for an empty series."""
        return self.bars[0] if self.bars else None

    def last(self) -> Bar | None:
        """Chronologically last bar, or None for an empty series."""
        return self.bars[-1] if self.bars else None

    # ------------------------------------------------------------------
    # Windowing
    # ------------------------------------------------------------------

    def last_n(self, count: int) -> list[Bar]:
        """Return the last ``min(count, len(self))`` bars in chronological order.

        ``count == 0`` yields an empty list; ``count >= len(self)`` yields every
        bar. The result is a new list.

        Raises:
            ValueError: If *count* is negative.
        """
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        start = len(self.bars) - min(count, len(self.bars))
        return list(self.bars[start:])

    def filter_last_days(self, count: int) -> list[Bar]:
        """Return the last *count* bars.

        Counts elements, not calendar days: on a daily series the two
        coincide, on an hourly series they do not. Same semantics as
        :meth:`last_n`.
        """
        return self.last_n(count)

    def window(self, count: int) -> Series:
        """Return the ``last_n(count)`` suffix as a new ``Series``."""
        return Series(symbol=self.symbol, bars=tuple(self.last_n(count)))

    # ------------------------------------------------------------------
    # Derived iteration
    # ------------------------------------------------------------------

    def closes(self) -> list[float]:
        return [bar.close for bar in self.bars]

    def volumes(self) -> list[int]:
        return [bar.volume for bar in self.bars]

    def to_dataframe(self) -> pd.DataFrame:
        """Return the bars as an OHLCV DataFrame indexed by UTC timestamp."""
        frame = pd.DataFrame(
            [bar.model_dump() for bar in self.bars],
            columns=["timestamp", "open", "high", "low", "close", "volume"],
        )
        frame.index = pd.to_datetime(frame.pop("timestamp"), unit="s", utc=True)
        return frame

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    @staticmethod
    def formatted_date(bar: Bar) -> str:
        """Render the bar's timestamp as ``YYYY-MM-DD`` in UTC."""
        moment = datetime.datetime.fromtimestamp(bar.timestamp, tz=datetime.UTC)
        return moment.strftime(DATE_FORMAT)
