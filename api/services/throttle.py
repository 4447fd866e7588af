"""
Per-identity call spacing for Riot API requests.

Unlike the request rate limiter in api.rate_limit, this one does not reject:
it delays a call until at least min_interval has passed since the previous
call for the same key. Last-call times live in a bounded LRU map so the
throttle never grows past `capacity` identities.
"""

import asyncio
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Optional

from api.config import settings


class KeyedThrottle:
    def __init__(
        self,
        min_interval: float = 0.1,
        capacity: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.min_interval = min_interval
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._last_call: "OrderedDict[str, float]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._last_call)

    def __contains__(self, key: str) -> bool:
        return key in self._last_call

    def delay_for(self, key: str) -> float:
        """Seconds to wait before `key` may be called again."""
        last = self._last_call.get(key)
        if last is None:
            return 0.0
        return max(0.0, self.min_interval - (self._clock() - last))

    async def wait(self, key: str) -> float:
        """
        Wait until `key` may be called and return the delay.

        The slot is reserved before sleeping, so concurrent waiters on one
        key queue up `min_interval` apart instead of waking together.
        """
        now = self._clock()
        last = self._last_call.get(key)
        slot = now if last is None else max(now, last + self.min_interval)
        self._record(key, slot)
        delay = slot - now
        if delay > 0:
            await self._sleep(delay)
        return delay

    def _record(self, key: str, at: float) -> None:
        self._last_call[key] = at
        self._last_call.move_to_end(key)
        while len(self._last_call) > self.capacity:
            self._last_call.popitem(last=False)

    def forget(self, key: str) -> Optional[float]:
        return self._last_call.pop(key, None)


riot_throttle = KeyedThrottle(
    min_interval=settings.riot_min_call_interval_ms / 1000,
    capacity=settings.riot_throttle_capacity,
)


def get_riot_throttle() -> KeyedThrottle:
    return riot_throttle
