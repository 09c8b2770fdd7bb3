"""
Redis access layer.

Used for short-lived coordination keys (discovery in-flight locks).
Degrades gracefully: callers get None when Redis is unavailable.
"""
import logging
from typing import Optional
import redis
from redis.exceptions import ConnectionError, TimeoutError, RedisError
from core.config import settings

logger = logging.getLogger(__name__)

# Redis connection pool (singleton)
_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Get Redis client with connection pooling. Returns None if Redis unavailable."""
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    try:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
            retry_on_timeout=True,
            health_check_interval=30
        )
        _redis_client.ping()
        logger.info("Redis connection established")
        return _redis_client
    except (ConnectionError, TimeoutError, RedisError) as e:
        logger.warning(f"Redis unavailable: {e}. Locks disabled.")
        _redis_client = None
        return None


def cache_key(prefix: str, *args) -> str:
    """Build a colon-joined key, skipping None parts."""
    key_parts = [prefix]
    for arg in args:
        if arg is not None:
            key_parts.append(str(arg))
    return ":".join(key_parts)


def acquire_lock(key: str, ttl_s: int, token: str) -> bool:
    """
    Acquire an in-flight lock with SET NX EX, storing the holder's token.

    Returns True if acquired or if Redis is unavailable (fail open),
    False if another holder already has it.
    """
    client = get_redis_client()
    if not client:
        return True  # fail open

    try:
        return bool(client.set(key, token, nx=True, ex=ttl_s))
    except (ConnectionError, TimeoutError, RedisError) as e:
        logger.warning(f"Lock acquire error for key {key}: {e}")
        return True  # fail open


# Delete only if the key still holds our token; after a TTL expiry it may belong to the next holder
_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
end
return 0
"""


def release_lock(key: str, token: str) -> bool:
    """Release a lock taken with acquire_lock. Returns True if this holder deleted it."""
    client = get_redis_client()
    if not client:
        return False
    try:
        released = bool(client.eval(_RELEASE_SCRIPT, 1, key, token))
        if not released:
            logger.warning(f"Lock {key} expired or was taken over before release")
        return released
    except (ConnectionError, TimeoutError, RedisError) as e:
        logger.warning(f"Lock release error for key {key}: {e}")
        return False
