"""Redis connection management.

Redis backs the two pieces of shared, non-durable state in this service:
the certificate verification cache and the rate-limit token buckets.
Neither is a source of truth, so losing Redis degrades performance and
abuse protection but never progress data, which lives in PostgreSQL.

Mirrors engine.py: with REDIS_URL set we build a connection pool at
import time; without it, redis_pool is None and every consumer uses its
in-memory implementation instead.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis

from app.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=20,
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Verify connectivity on startup, close the pool on shutdown."""
    if redis_pool is None:
        logger.info("No REDIS_URL configured: Redis features use in-memory fallbacks")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        logger.info("Redis connected: %s", SETTINGS.redis_url)
    except Exception:
        # Start anyway: cache misses and rate-limit checks will fail per
        # request and show up as degraded in /health.
        logger.exception("Redis connection failed on startup")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
