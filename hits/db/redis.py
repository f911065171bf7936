"""Redis connection management.

Mirrors engine.py: when REDIS_URL is configured (and DATABASE_URL is
not), counters live in Redis; otherwise nothing here is created and no
Redis server is needed.

Redis fits the counter workload well: a hit is a single atomic script
execution, sub-millisecond, with no connection-per-transaction overhead.
The trade-off is durability; a Redis without persistence loses its
counts on restart, which is why Postgres wins when both are configured.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from hits.core.config import SETTINGS

logger = logging.getLogger(__name__)

if SETTINGS.redis_url:
    redis_pool: aioredis.Redis | None = aioredis.from_url(  # type: ignore[type-arg]
        SETTINGS.redis_url,
        decode_responses=True,
        max_connections=50,  # badge bursts are short and wide
    )
else:
    redis_pool = None


@asynccontextmanager
async def lifespan_redis():
    """Startup/shutdown hook for Redis, mirroring lifespan_db().

    A failed ping is logged, not raised: /health reports Redis as
    degraded and every bump surfaces as "temporarily unavailable" until
    it comes back.
    """
    if redis_pool is None:
        logger.info("No REDIS_URL configured")
        yield
        return

    try:
        await redis_pool.ping()  # type: ignore[misc]  # redis stubs mistype async ping as bool
        logger.info("Redis connected")
    except (RedisError, OSError):
        logger.exception("Redis connection failed on startup")

    yield

    await redis_pool.aclose()
    logger.info("Redis connection pool closed")
