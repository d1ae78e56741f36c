"""Data fetching and rate limiting services.

Re-exports all public service classes so consumers can import directly:
    from Stock_Scope.services import MarketDataService, InsiderTradeService
"""

from Stock_Scope.services.health import HealthService
from Stock_Scope.services.insider_trades import InsiderTradeService, parse_insider_table
from Stock_Scope.services.market_data import MarketDataService
from Stock_Scope.services.rate_limiter import RateLimiter

__all__ = [
    # Infrastructure
    "RateLimiter",
    # Data services
    "InsiderTradeService",
    "MarketDataService",
    "parse_insider_table",
    # Auxiliary services
    "HealthService",
]
