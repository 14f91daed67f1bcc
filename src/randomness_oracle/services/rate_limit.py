"""Per-requester request throttling."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock

from randomness_oracle.core.errors import RateLimitedError

logger = logging.getLogger(__name__)


@dataclass
class _Window:
    count: int
    window_start: float


class RateLimiter:
    """Fixed-window counter bounding requests per identity.

    Bursts straddling a window boundary are tolerated; this is an approximate
    limiter, not a sliding log.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if max_requests <= 0:
            raise ValueError("max_requests must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, _Window] = {}
        self._lock = Lock()

    def allow(self, identity: str) -> bool:
        """Count one request for ``identity`` and return whether it is allowed."""
        key = identity.lower()
        now = self._clock()
        with self._lock:
            window = self._windows.get(key)
            if window is None or now - window.window_start > self.window_seconds:
                self._windows[key] = _Window(count=1, window_start=now)
                return True
            window.count += 1
            return window.count <= self.max_requests

    def check(self, identity: str) -> None:
        """Raise :class:`RateLimitedError` when ``identity`` is over its budget."""
        if not self.allow(identity):
            logger.warning("Rate limit exceeded for %s", identity.lower())
            raise RateLimitedError()

    def purge(self) -> int:
        """Drop identities idle for more than two windows.

        Returns:
            Number of identities removed
        """
        cutoff = self._clock() - 2 * self.window_seconds
        with self._lock:
            stale = [key for key, window in self._windows.items() if window.window_start < cutoff]
            for key in stale:
                del self._windows[key]
        return len(stale)

    def __len__(self) -> int:
        return len(self._windows)
