# infrastructure/rate_limiter.py
"""Request pacing for the embedding provider"""
import asyncio
import logging
import time
from typing import Awaitable, Callable

from core.interfaces import IRateLimiter
from core.exceptions import InvalidConfiguration
from config import settings

logger = logging.getLogger(settings.LOGGER_NAME)


class IntervalRateLimiter(IRateLimiter):
    """
    Fixed minimum interval between request starts, shared by all callers.

    Slots are reserved under a lock and waited for outside it, so N concurrent
    workers are spaced min_interval apart instead of all sleeping the same
    amount and firing together.
    """

    def __init__(
        self,
        min_interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if min_interval_seconds < 0:
            raise InvalidConfiguration(
                f"Rate limiter interval must not be negative, got {min_interval_seconds}"
            )
        self.min_interval = min_interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._next_slot = 0.0
        self._lock = asyncio.Lock()

    async def acquire(self) -> None:
        if self.min_interval == 0:
            return

        async with self._lock:
            now = self._clock()
            slot = max(now, self._next_slot)
            self._next_slot = slot + self.min_interval

        delay = slot - now
        if delay > 0:
            await self._sleep(delay)
