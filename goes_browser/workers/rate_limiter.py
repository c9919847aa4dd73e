# goes_browser/workers/rate_limiter.py

"""
Dispatch Rate Limiter - bound how many renders start per time window.

Sliding window limiter: remembers the start time of every dispatch inside the
current window and makes callers wait until the oldest one ages out once the
window is full.
"""

import asyncio
import time
from collections import deque
from typing import Any, Deque, Dict

from ..constants import DEFAULT_DISPATCH_RATE_LIMIT, DEFAULT_DISPATCH_WINDOW_SECONDS
from ..enums import LoggerName, LogSource
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.THUMBNAIL_WORKER, LogSource.WORKER)


class DispatchRateLimiter:
    """
    Sliding window rate limiter for render dispatch.

    At most max_starts acquisitions succeed within any window_seconds span.
    """

    def __init__(
        self,
        max_starts: int = DEFAULT_DISPATCH_RATE_LIMIT,
        window_seconds: float = DEFAULT_DISPATCH_WINDOW_SECONDS,
    ) -> None:
        if max_starts < 1:
            raise ValueError("max_starts must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_starts = max_starts
        self.window_seconds = window_seconds
        self._starts: Deque[float] = deque()
        self._lock = asyncio.Lock()
        self.throttled_total = 0

    def _prune(self, now: float) -> None:
        window_start = now - self.window_seconds
        while self._starts and self._starts[0] <= window_start:
            self._starts.popleft()

    async def try_acquire(self) -> bool:
        """
        Record a dispatch if the window has room.

        Returns:
            True if the dispatch may start now, False otherwise
        """
        async with self._lock:
            now = time.monotonic()
            self._prune(now)
            if len(self._starts) < self.max_starts:
                self._starts.append(now)
                return True
            return False

    async def acquire(self) -> None:
        """Wait until a dispatch may start, then record it."""
        throttled = False
        while True:
            async with self._lock:
                now = time.monotonic()
                self._prune(now)
                if len(self._starts) < self.max_starts:
                    self._starts.append(now)
                    return
                wait_seconds = self._starts[0] + self.window_seconds - now

            if not throttled:
                throttled = True
                self.throttled_total += 1
                logger.debug(
                    f"Dispatch rate limit reached ({self.max_starts}/"
                    f"{self.window_seconds}s), waiting {wait_seconds:.3f}s"
                )
            await asyncio.sleep(max(wait_seconds, 0.001))

    def get_stats(self) -> Dict[str, Any]:
        """Current window occupancy."""
        self._prune(time.monotonic())
        return {
            "limit": self.max_starts,
            "window_seconds": self.window_seconds,
            "current_starts": len(self._starts),
            "remaining": max(0, self.max_starts - len(self._starts)),
            "throttled_total": self.throttled_total,
        }
