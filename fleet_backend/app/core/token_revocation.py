"""
Token Revocation using Redis.

Logout blacklists the presented JWT until it would have expired anyway.
"""

import logging
from redis.exceptions import RedisError
import fleet_backend.app.core.redis_client as redis_client_module
from fleet_backend.app.core.config import settings

logger = logging.getLogger(__name__)

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    try:
        ttl_seconds = settings.access_token_expire_minutes * 60
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        await redis_client_module.redis_client.setex(key, ttl_seconds, str(user_id))
        return True
    except (RedisError, OSError):
        logger.exception("Error revoking token for user %s", user_id)
        return False


async def is_token_revoked(token: str) -> bool:
    """
    Check if a token has been revoked.

    If Redis is unreachable the check fails open: availability is preferred
    over enforcing logout.
    """
    try:
        key = f"{TOKEN_BLACKLIST_PREFIX}{token}"
        exists = await redis_client_module.redis_client.exists(key)
        return exists > 0
    except (RedisError, OSError):
        logger.warning("Token revocation check skipped: Redis unavailable", exc_info=True)
        return False
