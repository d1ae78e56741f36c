"""Request pacing for the external data sources.

A full analysis run fires several fetches at yfinance and openinsider at
once. ``RateLimiter`` bounds how many are in flight (a semaphore) and how
fast new ones start (a token bucket). It never retries: a failed request is
the caller's to report.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_REQUESTS_PER_SECOND: float = 2.0
DEFAULT_MAX_CONCURRENT: int = 5


class _TokenBucket:
    """Token bucket refilled continuously at *rate* tokens per second."""

    def __init__(self, rate: float, capacity: float) -> None:
        self._rate = rate
        self._capacity = capacity
        self._tokens = capacity
        self._updated_at = time.monotonic()
        self._lock = asyncio.Lock()

    async def take(self) -> None:
        """Remove one token, sleeping until one has accrued if the bucket is dry."""
        while True:
            async with self._lock:
                now = time.monotonic()
                self._tokens = min(
                    self._capacity, self._tokens + (now - self._updated_at) * self._rate
                )
                self._updated_at = now
                if self._tokens >= 1.0:
                    self._tokens -= 1.0
                    return
                shortfall = (1.0 - self._tokens) / self._rate
            await asyncio.sleep(shortfall)


class RateLimiter:
    """Concurrency cap plus token bucket, shared by every service in a run.

    Usage::

        limiter = RateLimiter(max_concurrent=5, requests_per_second=2.0)

        async with limiter.slot():
            frame = await fetch_history()
    """

    def __init__(
        self,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT,
        requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
    ) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        if requests_per_second <= 0:
            raise ValueError(f"requests_per_second must be > 0, got {requests_per_second}")

        self._slots = asyncio.Semaphore(max_concurrent)
        # Burst size equals the concurrency cap
        self._bucket = _TokenBucket(requests_per_second, float(max_concurrent))

        logger.debug(
            "Request pacing: %d in flight, %.1f starts/s",
            max_concurrent,
            requests_per_second,
        )

    async def acquire(self) -> None:
        """Wait for a free slot, then for a token."""
        await self._slots.acquire()
        try:
            await self._bucket.take()
        except BaseException:
            self._slots.release()
            raise

    def release(self) -> None:
        self._slots.release()

    @asynccontextmanager
    async def slot(self) -> AsyncIterator[None]:
        """Hold one request slot for the duration of the ``async with`` block."""
        await self.acquire()
        try:
            yield
        finally:
            self.release()
