"""Rate limiting dependency for FastAPI routes.

Declared per route rather than as middleware so each route picks its own
budget: completion toggles get TOGGLE_LIMIT per learner, the anonymous
verification page gets VERIFY_LIMIT per client IP, and /health has none.

Authenticated requests are keyed by the token's `sub`, anonymous ones by
client IP.  The token is decoded WITHOUT signature verification here; it
only selects a bucket.  A forged `sub` just gets its own bucket, and
require_user still rejects the request.
"""

from __future__ import annotations

import logging

import jwt as pyjwt
from fastapi import HTTPException, Request, status

from app.core.metrics import RATE_LIMIT_HITS
from app.db.redis import redis_pool
from app.services.rate_limiter import (
    InMemoryRateLimiter,
    RateLimitConfig,
    RateLimiter,
    RedisRateLimiter,
)

logger = logging.getLogger(__name__)

if redis_pool is not None:
    _rate_limiter: RateLimiter = RedisRateLimiter(redis_pool)
else:
    _rate_limiter = InMemoryRateLimiter()


def require_rate_limit(config: RateLimitConfig = RateLimitConfig()):
    """Dependency factory: enforce `config` on a route.

    @router.put("/items/{item_id}", dependencies=[Depends(require_rate_limit(TOGGLE_LIMIT))])
    """

    async def _check(request: Request) -> None:
        key = _build_key(request)
        result = await _rate_limiter.check(key, config)

        if not result.allowed:
            RATE_LIMIT_HITS.labels(
                key_type="user" if key.startswith("user:") else "ip"
            ).inc()
            logger.warning("Rate limit exceeded key=%s", key)
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Rate limit exceeded",
                headers={
                    "Retry-After": str(int(result.retry_after) + 1),
                    "X-RateLimit-Limit": str(result.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

    return _check


def _build_key(request: Request) -> str:
    auth_header = request.headers.get("authorization", "")
    if auth_header.startswith("Bearer "):
        try:
            claims = pyjwt.decode(auth_header[7:], options={"verify_signature": False})
        except pyjwt.PyJWTError:
            claims = {}
        sub = claims.get("sub")
        if sub:
            return f"user:{sub}"

    client_ip = request.client.host if request.client else "unknown"
    return f"ip:{client_ip}"
