import logging
from typing import Optional

import redis

from config import settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Return the shared client, or None when caching is not configured."""
    global _redis_client
    if _redis_client is not None:
        return _redis_client

    if settings.REDIS_URL:
        _redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)
        logger.info("Redis cache enabled")
        return _redis_client

    return None


def close_redis_client() -> None:
    global _redis_client
    if _redis_client is None:
        return
    try:
        _redis_client.close()
    except redis.RedisError as exc:
        logger.warning("Error closing redis client: %s", exc)
    finally:
        _redis_client = None
