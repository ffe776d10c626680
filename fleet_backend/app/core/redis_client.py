"""
Redis client initialization and connection management.

Redis holds the revoked-token list used by logout.
"""

import redis.asyncio as redis
from fleet_backend.app.core.config import settings


# Create async Redis client (connects lazily on first command)
redis_client = redis.from_url(
    settings.redis_url,
    decode_responses=settings.redis_decode_responses,
)


async def get_redis():
    """
    Get Redis client instance.

    This can be used as a FastAPI dependency if needed.
    """
    return redis_client
