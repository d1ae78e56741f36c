"""Analytics over OHLCV series: descriptive stats, returns, and quality checks.

Re-exports all public functions so consumers can import directly:
    from Stock_Scope.analysis import compute_stats, total_return
"""

from Stock_Scope.analysis.quality import ValidationCheck, ValidationResult, validate_bars
from Stock_Scope.analysis.returns import price_change, total_return
from Stock_Scope.analysis.stats import compute_series_stats, compute_stats

__all__ = [
    # Stats
    "compute_series_stats",
    "compute_stats",
    # Returns
    "price_change",
    "total_return",
    # Quality
    "ValidationCheck",
    "ValidationResult",
    "validate_bars",
]
