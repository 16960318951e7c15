"""Sliding-window, in-memory rate limiting per instance."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from unified_intelligence.errors import RateLimitError

log = logging.getLogger(__name__)


class RateLimiter:
    """Allows at most ``max_requests`` per instance within a sliding window."""

    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, list[float]] = {}
        self._lock = asyncio.Lock()

    def _recent(self, stamps: list[float], now: float) -> list[float]:
        return [t for t in stamps if now - t < self.window_seconds]

    async def check_rate_limit(self, instance_id: str) -> None:
        """Record a request, raising RateLimitError if the limit is reached."""
        async with self._lock:
            now = self._clock()
            stamps = self._recent(self._windows.get(instance_id, []), now)
            self._windows[instance_id] = stamps
            if len(stamps) >= self.max_requests:
                log.warning(
                    "Rate limit exceeded for instance '%s': %d requests in %ss",
                    instance_id,
                    len(stamps),
                    self.window_seconds,
                )
                raise RateLimitError()
            stamps.append(now)

    async def usage_stats(self) -> dict[str, int]:
        """Request counts in the current window; idle instances are dropped."""
        async with self._lock:
            now = self._clock()
            self._windows = {
                instance: recent
                for instance, stamps in self._windows.items()
                if (recent := self._recent(stamps, now))
            }
            return {instance: len(stamps) for instance, stamps in self._windows.items()}

    async def clear_instance(self, instance_id: str) -> None:
        """Forget all recorded requests of one instance."""
        async with self._lock:
            self._windows.pop(instance_id, None)