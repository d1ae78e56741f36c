"""Report models: the composed output of a series summary and a full analysis run.

These carry no computation of their own. They bundle what the analysis
functions produced so it can be rendered to the terminal, Markdown, or JSON
(``model_dump_json()``).
"""

import datetime

from pydantic import BaseModel, ConfigDict, computed_field

from Stock_Scope.models.insider import InsiderTrade
from Stock_Scope.models.market_data import Bar, PriceChange, Stats


class BoundaryBar(BaseModel):
    """A first or last bar of a series together with its display date."""

    model_config = ConfigDict(frozen=True)

    date: str
    bar: Bar


class SeriesReport(BaseModel):
    """Summary of one series: boundary bars, stats, and returns.

    ``stats_window`` is None when ``stats`` covers the full series, otherwise
    the number of trailing bars it was computed over. ``total_return`` and
    ``daily_change`` always cover the full series.

    Non-finite returns serialize to JSON as ``Infinity`` / ``NaN`` so they stay
    distinct from ``null`` (too few bars).
    """

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    symbol: str
    data_points: int
    first: BoundaryBar | None = None
    last: BoundaryBar | None = None
    stats: Stats | None = None
    stats_window: int | None = None
    total_return: float | None = None
    daily_change: PriceChange | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_data(self) -> bool:
        """False for an empty series; renderers show a "no data" message."""
        return self.data_points > 0


class AnalysisRun(BaseModel):
    """Everything gathered for one symbol in a full analysis run.

    Optional sections that failed to fetch carry the failure message in the
    matching ``*_error`` field instead of data.
    """

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    symbol: str
    interval: str
    range: str
    window: int
    generated_at: datetime.datetime

    history: SeriesReport
    recent: SeriesReport

    latest: Bar | None = None
    latest_error: str | None = None

    range_start: datetime.datetime | None = None
    range_end: datetime.datetime | None = None
    range_report: SeriesReport | None = None
    range_error: str | None = None

    search_results: list[str] = []
    search_error: str | None = None

    insider_trades: list[InsiderTrade] | None = None
    insider_error: str | None = None
