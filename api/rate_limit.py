"""
Per-client request rate limiting for the HTTP API.

Fixed windows of `rate_period` seconds. When REDIS_URL is set the counters
live in Redis so every API worker shares one budget; otherwise, or once
Redis stops answering, they live in this process.

Outbound Riot calls are spaced separately by api.services.throttle.
"""

import logging
import time
from typing import Dict, Optional, Tuple

import redis.asyncio as aioredis

from api.config import settings

logger = logging.getLogger("rankchallenge")

MEMORY_SWEEP_THRESHOLD = 10000


class FixedWindowLimiter:
    def __init__(self, limit: int, period: int, redis_url: Optional[str] = None):
        self.limit = limit
        self.period = period
        self.redis_url = redis_url
        self._redis: Optional[aioredis.Redis] = None
        # None until the first connection attempt
        self._redis_ok: Optional[bool] = None
        self._counts: Dict[str, int] = {}

    def window(self, now: Optional[float] = None) -> int:
        return int(time.time() if now is None else now) // self.period

    def bucket(self, key: str, now: Optional[float] = None) -> str:
        return f"rate:{key}:{self.window(now)}"

    def retry_after(self, now: Optional[float] = None) -> int:
        """Seconds until the current window closes."""
        now = int(time.time() if now is None else now)
        return self.period - now % self.period

    async def _get_redis(self) -> Optional[aioredis.Redis]:
        if self._redis_ok is False:
            return None
        if self._redis is not None:
            return self._redis
        if not self.redis_url:
            self._redis_ok = False
            logger.info("REDIS_URL not set, counting requests in memory")
            return None
        client = aioredis.from_url(self.redis_url, encoding="utf-8", decode_responses=True)
        try:
            await client.ping()
        except Exception as e:
            self._redis_ok = False
            logger.warning(f"Redis unreachable, counting requests in memory: {e}")
            return None
        self._redis, self._redis_ok = client, True
        logger.info("Rate limiting through Redis")
        return client

    def _count_in_memory(self, bucket: str) -> int:
        if len(self._counts) > MEMORY_SWEEP_THRESHOLD:
            current = f":{self.window()}"
            self._counts = {k: v for k, v in self._counts.items() if k.endswith(current)}
        self._counts[bucket] = self._counts.get(bucket, 0) + 1
        return self._counts[bucket]

    async def hit(self, key: str) -> Tuple[bool, int]:
        """
        Count one request for `key`.

        Returns:
            Tuple of (allowed, requests seen in this window)
        """
        bucket = self.bucket(key)
        client = await self._get_redis()
        if client is not None:
            try:
                pipe = client.pipeline()
                pipe.incr(bucket)
                pipe.expire(bucket, self.period)
                count = (await pipe.execute())[0]
                return count <= self.limit, count
            except Exception as e:
                logger.error(f"Redis rate limit error, using memory for this request: {e}")
        count = self._count_in_memory(bucket)
        return count <= self.limit, count

    async def close(self) -> None:
        if self._redis is not None:
            await self._redis.aclose()
            logger.info("Redis connection closed")
        self._redis, self._redis_ok = None, None


limiter = FixedWindowLimiter(settings.rate_limit, settings.rate_period, settings.redis_url)


async def check_rate_limit(key: str) -> Tuple[bool, int]:
    return await limiter.hit(key)


def retry_after() -> int:
    return limiter.retry_after()


async def close_redis() -> None:
    await limiter.close()
