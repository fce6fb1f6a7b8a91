"""
Rate Limiter — caps outbound validations to N requests per sliding window.

Each acquire() prunes timestamps that left the trailing window, then either
commits a new timestamp or suspends until the oldest tracked request exits
the window. Callers queue on an asyncio.Lock, so a burst drains in arrival
order.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable, Deque, Optional

from account_validator.validation.metrics import record_rate_limit_wait

logger = logging.getLogger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """Sliding-window limiter: at most *max_requests* per *window_ms*."""

    def __init__(
        self,
        max_requests: int = 10,
        window_ms: int = 60_000,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        if max_requests <= 0:
            raise ValueError(f"max_requests must be positive, got {max_requests}")
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self.max_requests = max_requests
        self.window_ms = window_ms
        self._clock = clock or _now_ms
        self._sleep = sleep or asyncio.sleep
        self._requests: Deque[float] = deque()
        self._lock = asyncio.Lock()

    async def acquire(self) -> bool:
        """Suspend until a slot is free, then commit the current timestamp."""
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)

                if len(self._requests) < self.max_requests:
                    self._requests.append(now)
                    return True

                wait_ms = self.window_ms - (now - self._requests[0])
                if wait_ms > 0:
                    record_rate_limit_wait()
                    logger.debug(
                        "Rate limit reached (%d/%d) — waiting %.0fms",
                        len(self._requests), self.max_requests, wait_ms,
                    )
                    await self._sleep(wait_ms / 1000)

    def _prune(self, now: float) -> None:
        while self._requests and now - self._requests[0] >= self.window_ms:
            self._requests.popleft()

    def reset(self) -> None:
        self._requests.clear()

    def status(self) -> dict:
        """
        Snapshot of the current window.

        Returns:
            {
                "active_requests": int,
                "max_requests": int,
                "remaining": int,
                "reset_at": float | None,   # epoch ms at which the oldest request leaves
            }
        """
        now = self._clock()
        active = [t for t in self._requests if now - t < self.window_ms]
        return {
            "active_requests": len(active),
            "max_requests": self.max_requests,
            "remaining": max(0, self.max_requests - len(active)),
            "reset_at": active[0] + self.window_ms if active else None,
        }
