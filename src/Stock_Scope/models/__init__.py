"""Pydantic v2 models, enums, and type definitions.

Re-exports all public models so consumers can import directly:
    from Stock_Scope.models import Bar, Series, Stats
"""

from Stock_Scope.models.enums import (
    TemporalScope,
    TransactionType,
    TrendDirection,
    resolve_scope,
)
from Stock_Scope.models.health import HealthStatus
from Stock_Scope.models.insider import InsiderTrade
from Stock_Scope.models.market_data import Bar, PriceChange, Stats
from Stock_Scope.models.report import AnalysisRun, BoundaryBar, SeriesReport
from Stock_Scope.models.series import Series

__all__ = [
    # Enums
    "TemporalScope",
    "TransactionType",
    "TrendDirection",
    "resolve_scope",
    # Market data
    "Bar",
    "PriceChange",
    "Series",
    "Stats",
    # Reports
    "AnalysisRun",
    "BoundaryBar",
    "SeriesReport",
    # Insider trades
    "InsiderTrade",
    # Health
    "HealthStatus",
]
