"""Background eviction of stale oracle state.

This module provides the CacheSweepWorker class that periodically removes
randomness records past their retention window and rate-limit windows that
have gone idle.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from randomness_oracle.services.randomness_cache import NonceRandomnessCache
from randomness_oracle.services.rate_limit import RateLimiter

logger = logging.getLogger(__name__)

MIN_SWEEP_INTERVAL_SECONDS = 0.1


@dataclass
class SweepStats:
    """Running totals of evictions, exposed for tests and diagnostics."""

    passes: int = 0
    records_evicted: int = 0
    identities_purged: int = 0


class CacheSweepWorker:
    """Periodically sweeps the randomness cache and the rate limiter.

    Started alongside the application and stopped on shutdown.
    """

    def __init__(
        self,
        cache: NonceRandomnessCache,
        rate_limiter: RateLimiter | None = None,
        *,
        interval_seconds: float = 30.0,
    ) -> None:
        self.cache = cache
        self.rate_limiter = rate_limiter
        self.interval_seconds = max(MIN_SWEEP_INTERVAL_SECONDS, float(interval_seconds))
        self.stats = SweepStats()
        self._task: asyncio.Task[None] | None = None
        self._stopping = asyncio.Event()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Start the background sweep loop."""

        if self._task is None or self._task.done():
            self._stopping.clear()
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        """Stop the background sweep loop and wait for it to finish."""

        if self._task is None:
            return

        self._stopping.set()
        await self._task
        self._task = None

    def sweep_once(self) -> None:
        """Run one eviction pass over the cache and the rate limiter."""
        evicted = self.cache.sweep()
        purged = self.rate_limiter.purge() if self.rate_limiter is not None else 0
        self.stats.passes += 1
        self.stats.records_evicted += evicted
        self.stats.identities_purged += purged
        if evicted or purged:
            logger.debug(
                "Sweep pass evicted %d records and purged %d identities", evicted, purged
            )

    async def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                await asyncio.wait_for(self._stopping.wait(), timeout=self.interval_seconds)
            except asyncio.TimeoutError:
                pass
            if self._stopping.is_set():
                return

            try:
                self.sweep_once()
            except (RuntimeError, ValueError, KeyError) as e:
                logger.error("CacheSweepWorker failed a sweep pass: %s", e, exc_info=True)
