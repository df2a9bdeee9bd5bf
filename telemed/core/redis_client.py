import redis

from .config import settings

# Connections are opened lazily on first command
redis_client = redis.from_url(settings.REDIS_URL, decode_responses=True)


def get_redis():
    """Get Redis client."""
    return redis_client
