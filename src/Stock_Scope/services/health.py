"""Availability probes for yfinance and the openinsider screener.

The two probes run side by side, each under its own timeout, and a failing
probe only marks its own source as down.
"""

from __future__ import annotations

import asyncio
import datetime
import logging
from typing import Final

import httpx

from Stock_Scope.models.health import HealthStatus
from Stock_Scope.services.insider_trades import OPENINSIDER_SCREENER_URL

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

# Liquid ETF whose recent history should always exist
YFINANCE_CANARY_TICKER: Final[str] = "SPY"
YFINANCE_CANARY_PERIOD: Final[str] = "5d"

# Per-probe timeouts, seconds
YFINANCE_CHECK_TIMEOUT: Final[float] = 10.0
INSIDER_CHECK_TIMEOUT: Final[float] = 10.0


def _probe_result(source: str, outcome: bool | BaseException) -> bool:
    if isinstance(outcome, BaseException):
        logger.warning("%s health probe raised: %s", source, outcome)
        return False
    return outcome


class HealthService:
    """Check availability of the external data sources.

    Usage::

        health = HealthService()
        status = await health.check_all()
        if not status.insider_source_available:
            logger.warning("openinsider is down, skipping insider trades.")
    """

    def __init__(self, insider_url: str = OPENINSIDER_SCREENER_URL) -> None:
        self._insider_url = insider_url

    async def check_all(self) -> HealthStatus:
        """Probe both sources at once; a probe that raises reports the source as down."""
        yfinance_ok, insider_ok = await asyncio.gather(
            self.check_yfinance(),
            self.check_insider_source(),
            return_exceptions=True,
        )

        status = HealthStatus(
            yfinance_available=_probe_result("yfinance", yfinance_ok),
            insider_source_available=_probe_result("openinsider", insider_ok),
            last_check=datetime.datetime.now(datetime.UTC),
        )

        logger.info(
            "Health check complete: yfinance=%s openinsider=%s",
            status.yfinance_available,
            status.insider_source_available,
        )
        return status

    async def check_yfinance(self) -> bool:
        """True when yfinance returns at least one recent bar for the canary ticker."""
        try:
            has_rows: bool = await asyncio.wait_for(
                asyncio.to_thread(self._yfinance_canary),
                timeout=YFINANCE_CHECK_TIMEOUT,
            )
        except TimeoutError:
            logger.warning("yfinance probe timed out after %.0fs", YFINANCE_CHECK_TIMEOUT)
            return False
        except Exception:
            logger.warning("yfinance probe failed", exc_info=True)
            return False

        if not has_rows:
            logger.warning("yfinance probe got no rows for %s", YFINANCE_CANARY_TICKER)
        return has_rows

    async def check_insider_source(self) -> bool:
        """Check that the openinsider screener answers with HTTP 200."""
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(INSIDER_CHECK_TIMEOUT),
                follow_redirects=True,
            ) as client:
                response = await asyncio.wait_for(
                    client.get(self._insider_url),
                    timeout=INSIDER_CHECK_TIMEOUT,
                )
        except TimeoutError:
            logger.warning("openinsider health check timed out.")
            return False
        except httpx.HTTPError as exc:
            logger.warning("openinsider health check failed: %s", exc)
            return False

        if response.status_code != 200:  # noqa: PLR2004
            logger.warning("openinsider returned HTTP %d.", response.status_code)
            return False
        return True

    @staticmethod
    def _yfinance_canary() -> bool:
        """Blocking yfinance call; run in a worker thread."""
        import yfinance  # type: ignore[import-untyped]  # noqa: PLC0415

        frame = yfinance.Ticker(YFINANCE_CANARY_TICKER).history(period=YFINANCE_CANARY_PERIOD)
        return not frame.empty
