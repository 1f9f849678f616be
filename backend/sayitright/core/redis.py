"""Redis connection"""

from typing import Optional

import redis.asyncio as redis
from redis.asyncio import Redis

from sayitright.core.config import get_settings

settings = get_settings()

# Shared client (holds its own connection pool)
_redis_client: Optional[Redis] = None


async def get_redis() -> Redis:
    """Return the shared Redis client, creating it on first use"""
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.redis_url,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


async def close_redis() -> None:
    """Close the shared Redis client"""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None
