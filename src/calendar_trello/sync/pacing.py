"""Pacing of sequential Trello writes.

A token bucket: `capacity` calls may go out back to back, after which calls
are spaced at `1 / rate` seconds. With the defaults (rate 10/s, capacity 1)
consecutive card writes are at least 100 ms apart.

One limiter belongs to one sequential pipeline; it is not shared between
concurrently running pipelines.
"""

from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable

# Float slack so a refill that lands a hair under one token still counts
_EPSILON = 1e-9


class RateLimiter:
    """Token-bucket limiter for sequential async calls.

    Example:
        ```python
        limiter = RateLimiter(rate=10.0)
        for card in cards:
            await limiter.acquire()
            await trello.move_card(card.id, list_id)
        ```
    """

    def __init__(
        self,
        rate: float,
        capacity: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize the limiter.

        Args:
            rate: Tokens added per second
            capacity: Maximum burst size
            clock: Monotonic clock in seconds
            sleep: Coroutine used to wait
        """
        if rate <= 0:
            raise ValueError("rate must be positive")
        if capacity < 1:
            raise ValueError("capacity must be at least 1")

        self.rate = rate
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()

    @property
    def min_interval(self) -> float:
        """Spacing between calls once the burst is used up."""
        return 1.0 / self.rate

    @property
    def available(self) -> float:
        self._refill()
        return self._tokens

    def _refill(self) -> None:
        now = self._clock()
        elapsed = max(0.0, now - self._updated)
        self._tokens = min(float(self.capacity), self._tokens + elapsed * self.rate)
        self._updated = now

    async def acquire(self) -> None:
        """Wait until a token is available and take it."""
        while True:
            self._refill()
            if self._tokens >= 1.0 - _EPSILON:
                self._tokens -= 1.0
                return
            await self._sleep((1.0 - self._tokens) / self.rate)
