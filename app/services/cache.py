"""Read-through cache for certificate verification lookups.

The public verification page is the one hot, anonymous read in this
service, and its answer never changes once a certificate exists
(certificates are immutable and never revoked).  That makes it safe to
cache without any invalidation: the TTL only bounds memory use.

Progress reads are NOT cached.  They must reflect a toggle the moment it
returns, and the request's transaction commits after the handler runs,
so an invalidate-on-write cache could be repopulated with stale data.

Lookups of unknown codes are not cached either, so a certificate issued
a moment after someone mistyped its code is still found.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from app.db.redis import redis_pool


@runtime_checkable
class CacheService(Protocol):
    async def get(self, key: str) -> str | None:
        """Fetch a cached value.  Returns None on cache miss."""
        ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value with a TTL (time to live)."""
        ...


class InMemoryCacheService:
    """In-memory cache for dev/tests: no TTL enforcement.

    The autouse fixture in conftest.py clears the store between tests.
    """

    def __init__(self) -> None:
        self._store: dict[str, str] = {}

    async def get(self, key: str) -> str | None:
        return self._store.get(key)

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        self._store[key] = value


class RedisCacheService:
    """Redis-backed cache: shared across all API instances."""

    # Key prefix prevents collisions with the rate limiter's keys
    _PREFIX = "cache:"

    def __init__(self, redis_client) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> str | None:
        return await self._redis.get(f"{self._PREFIX}{key}")

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._redis.setex(f"{self._PREFIX}{key}", ttl_seconds, value)


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

if redis_pool is not None:
    cache_service: CacheService = RedisCacheService(redis_pool)
else:
    cache_service = InMemoryCacheService()
