"""Optional Redis cache in front of verse lookups and searches.

Only authentic verse texts are ever handed to this module; placeholders are
regenerated on every population run, so caching them would pin stale text.
When Redis is disabled or unreachable every read is a miss and every write is
dropped.
"""
import hashlib
import json
import logging
from typing import Any, List, Optional

import redis
from redis.exceptions import RedisError

from soapbox_bible.config import Settings, get_settings

logger = logging.getLogger(__name__)

_redis_client: Optional[redis.Redis] = None

VERSE_PREFIX = "verse"
SEARCH_PREFIX = "search"


def initialize_redis(settings: Optional[Settings] = None) -> None:
    """Connect to Redis when caching is enabled; leave the cache off otherwise."""
    global _redis_client

    if _redis_client is not None:
        logger.warning("Redis client already initialized")
        return

    settings = settings or get_settings()
    if not settings.cache_enabled:
        logger.info("Verse cache disabled")
        return

    client = redis.from_url(
        settings.redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
    )
    try:
        client.ping()
    except RedisError as e:
        logger.error(f"Redis unreachable at {settings.redis_url}, serving uncached: {e}")
        return

    _redis_client = client
    logger.info(f"Verse cache connected: {settings.redis_url}")


def close_redis() -> None:
    global _redis_client

    if _redis_client is None:
        return
    try:
        _redis_client.close()
    except RedisError as e:
        logger.error(f"Error closing Redis client: {e}")
    finally:
        _redis_client = None


def _generate_cache_key(prefix: str, *parts: Any) -> str:
    """``prefix:<digest>`` over case- and whitespace-insensitive parts."""
    content = ":".join(part.strip().lower() if isinstance(part, str) else str(part) for part in parts)
    return f"{prefix}:{hashlib.sha256(content.encode()).hexdigest()[:16]}"


def _read(key: str) -> Optional[Any]:
    if _redis_client is None:
        return None
    try:
        raw = _redis_client.get(key)
    except RedisError as e:
        logger.error(f"Cache read failed for {key}: {e}")
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning(f"Discarding unreadable cache entry {key}")
        return None


def _write(key: str, payload: Any, ttl: int) -> bool:
    if _redis_client is None:
        return False
    serialized = json.dumps(payload, default=str)
    try:
        if ttl > 0:
            _redis_client.setex(key, ttl, serialized)
        else:
            _redis_client.set(key, serialized)
    except RedisError as e:
        logger.error(f"Cache write failed for {key}: {e}")
        return False
    return True


def _clear_prefix(prefix: str) -> int:
    if _redis_client is None:
        return 0
    try:
        keys = _redis_client.keys(f"{prefix}:*")
        return _redis_client.delete(*keys) if keys else 0
    except RedisError as e:
        logger.error(f"Failed to clear cached {prefix} entries: {e}")
        return 0


class CacheService:
    """Verse and search cache keyed by (reference, translation) and (query, translation, limit)."""

    @staticmethod
    def get_verse(reference: str, translation: str) -> Optional[dict]:
        return _read(_generate_cache_key(VERSE_PREFIX, reference, translation))

    @staticmethod
    def set_verse(reference: str, translation: str, verse_data: dict) -> bool:
        ttl = get_settings().cache_ttl_verses
        return _write(_generate_cache_key(VERSE_PREFIX, reference, translation), verse_data, ttl)

    @staticmethod
    def get_search(query: str, translation: str, limit: int) -> Optional[List[dict]]:
        return _read(_generate_cache_key(SEARCH_PREFIX, query, translation, limit))

    @staticmethod
    def set_search(query: str, translation: str, limit: int, results: List[dict]) -> bool:
        ttl = get_settings().cache_ttl_searches
        return _write(_generate_cache_key(SEARCH_PREFIX, query, translation, limit), results, ttl)

    @staticmethod
    def clear_searches() -> int:
        """Drop cached search pages after the store has been rewritten."""
        return _clear_prefix(SEARCH_PREFIX)

    @staticmethod
    def clear_verses() -> int:
        """Drop cached single verses; they carry no expiry by default."""
        return _clear_prefix(VERSE_PREFIX)
