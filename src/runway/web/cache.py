"""Result memoization with Redis and in-memory fallback.

Simulations are pure, so a response is keyed by every strategy field plus
the grid. A changed field is simply a different key; nothing is patched in
place.
"""

import json
import logging
from typing import Any, Awaitable, Callable

from cachetools import TTLCache

from runway.analysis import StrategyParameters

logger = logging.getLogger(__name__)


def simulation_cache_key(prefix: str, params: StrategyParameters, *extra: Any) -> str:
    fields = ":".join(repr(v) for v in vars(params).values())
    if not extra:
        return f"{prefix}:{fields}"
    return f"{prefix}:{fields}:" + ":".join(repr(e) for e in extra)


class CacheService:
    """Unified cache interface supporting Redis or in-memory TTLCache."""

    def __init__(self, redis_client=None, ttl: int = 300, maxsize: int = 1024):
        self._redis = redis_client
        self._ttl = ttl
        self._memory = TTLCache(maxsize=maxsize, ttl=ttl)
        self._using_redis = redis_client is not None
        self.hits = 0
        self.misses = 0

    @classmethod
    async def create(cls, redis_url: str, ttl: int = 300) -> "CacheService":
        """Factory method that tries Redis, falls back to in-memory."""
        if not redis_url:
            logger.info("Cache: no Redis URL configured, using in-memory TTLCache")
            return cls(ttl=ttl)
        try:
            import redis.asyncio as aioredis

            client = aioredis.from_url(redis_url, decode_responses=True)
            await client.ping()
            logger.info("Cache: Connected to Redis")
            return cls(redis_client=client, ttl=ttl)
        except Exception as e:
            logger.warning(f"Cache: Redis unavailable ({e}), using in-memory TTLCache")
            return cls(ttl=ttl)

    async def get(self, key: str) -> Any | None:
        if not self._using_redis:
            return self._memory.get(key)
        try:
            value = await self._redis.get(key)
        except Exception as e:
            logger.warning(f"Cache get error: {e}")
            return None
        return None if value is None else json.loads(value)

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        if not self._using_redis:
            self._memory[key] = value
            return
        try:
            await self._redis.setex(key, ttl or self._ttl, json.dumps(value, default=str))
        except Exception as e:
            logger.warning(f"Cache set error: {e}")

    async def memoize(
        self, key: str, compute: Callable[[], Awaitable[Any] | Any]
    ) -> tuple[Any, bool]:
        """Return (value, cached). ``compute`` runs only on a miss."""
        cached = await self.get(key)
        if cached is not None:
            self.hits += 1
            return cached, True

        self.misses += 1
        value = compute()
        if hasattr(value, "__await__"):
            value = await value
        await self.set(key, value)
        return value, False

    async def close(self) -> None:
        """Close the cache connection."""
        if self._using_redis and self._redis:
            await self._redis.aclose()

    @property
    def is_redis(self) -> bool:
        return self._using_redis
