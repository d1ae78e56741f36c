"""Shared helpers for the data-source service modules.

Numeric cleanup for provider payloads and the single-attempt fetch wrapper
that ``market_data`` and ``insider_trades`` route every request through.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable, Coroutine
from typing import Any, Final, TypeVar

from Stock_Scope.services.rate_limiter import RateLimiter
from Stock_Scope.utils.exceptions import DataFetchError, DataSourceUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Shared constants
# ---------------------------------------------------------------------------

YFINANCE_SOURCE: Final[str] = "yfinance"
OPENINSIDER_SOURCE: Final[str] = "openinsider"
EXTERNAL_CALL_TIMEOUT_SECONDS: Final[float] = 30.0


# ---------------------------------------------------------------------------
# Safe type conversions
# ---------------------------------------------------------------------------


def _finite(value: object) -> float | None:
    try:
        number = float(str(value))
    except (ValueError, TypeError):
        return None
    return number if math.isfinite(number) else None


def safe_float(value: object) -> float | None:
    """Return *value* as a finite float; None, NaN, inf and junk give None."""
    if value is None:
        return None
    return _finite(value)


def safe_int(value: object) -> int:
    """Return *value* truncated to a non-negative int; unusable input gives 0."""
    number = None if value is None else _finite(value)
    if number is None:
        return 0
    return max(int(number), 0)


# ---------------------------------------------------------------------------
# Fetch wrapper
# ---------------------------------------------------------------------------


async def fetch_once(
    fetch_fn: Callable[[], Coroutine[Any, Any, T]],
    *,
    rate_limiter: RateLimiter,
    ticker: str,
    source: str,
    label: str,
    timeout: float = EXTERNAL_CALL_TIMEOUT_SECONDS,
) -> T:
    """Run one rate-limited fetch with a timeout; no retry.

    Catches broad ``Exception`` because yfinance raises inconsistent types,
    then re-raises as ``DataSourceUnavailableError``. ``DataFetchError``
    subclasses raised by *fetch_fn* pass through unchanged.

    Args:
        fetch_fn: Zero-argument callable returning a coroutine.
        rate_limiter: RateLimiter instance gating the request.
        ticker: Ticker symbol for error context.
        source: Data source name for error context.
        label: Human-readable label for log messages.
        timeout: Seconds before the fetch is abandoned.

    Returns:
        Whatever *fetch_fn* returns.

    Raises:
        DataSourceUnavailableError: On timeout or any unexpected failure.
    """
    async with rate_limiter.slot():
        try:
            return await asyncio.wait_for(fetch_fn(), timeout=timeout)
        except DataFetchError:
            raise
        except TimeoutError as exc:
            logger.warning("%s timed out after %.1fs", label, timeout)
            raise DataSourceUnavailableError(
                f"Timed out fetching {label} after {timeout:.1f}s",
                ticker=ticker,
                source=source,
            ) from exc
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s failed: %s", label, exc)
            raise DataSourceUnavailableError(
                f"Failed to fetch {label}: {exc}",
                ticker=ticker,
                source=source,
            ) from exc
