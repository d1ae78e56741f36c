"""Market data models: OHLCV bars and the aggregates derived from them.

Prices are plain floats; volumes are unbounded Python ints so cumulative
totals can never wrap.
"""

from pydantic import BaseModel, ConfigDict, Field

from Stock_Scope.models.enums import TrendDirection


class Bar(BaseModel):
    """A single OHLCV (open-high-low-close-volume) observation.

    Frozen because historical price data should never be mutated after creation.
    Price sanity (``high >= low``, positive prices) is not enforced here; see
    ``Stock_Scope.analysis.quality.validate_bars``.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: int = Field(ge=0)


class Stats(BaseModel):
    """Point-in-time aggregate snapshot over a collection of bars.

    ``min_price``/``max_price``/``avg_price`` are computed over closes only.
    ``avg_volume`` is the integer-truncated mean of volumes.
    """

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    symbol: str
    min_price: float
    max_price: float
    avg_price: float
    total_volume: int
    avg_volume: int
    data_points: int


class PriceChange(BaseModel):
    """Close-to-close move between the last two bars of a window."""

    model_config = ConfigDict(frozen=True, ser_json_inf_nan="constants")

    previous_close: float
    latest_close: float
    change: float
    change_percent: float
    direction: TrendDirection
