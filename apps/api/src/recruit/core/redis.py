"""
Redis Connection

Async Redis client backing the application key-value store and the
submission rate limiter.
"""

import logging

from redis.asyncio import Redis, from_url

from recruit.core.config import settings

logger = logging.getLogger(__name__)

# Redis client instance
redis_client: Redis | None = None


async def init_redis() -> Redis:
    """
    Open the Redis connection and verify it with a PING.

    Call this on application startup.
    """
    global redis_client
    redis_client = from_url(
        settings.redis_url,
        encoding="utf-8",
        decode_responses=True,
    )
    await redis_client.ping()
    logger.info("Redis connection established")
    return redis_client


async def close_redis() -> None:
    """Close Redis connection."""
    global redis_client
    if redis_client:
        await redis_client.aclose()
        redis_client = None
