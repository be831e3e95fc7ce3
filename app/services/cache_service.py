"""
Redis Cache Service

Caches the genre list, which only changes when the catalog is refreshed.
Falls back to an in-process dict when Redis is unavailable.
"""

import json
import time
from typing import Any, Dict, Optional, Tuple
import redis

from ..config import get_settings
from ..core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()

GENRES_KEY = "genres:all"

# Redis client singleton
_redis_client: Optional[redis.Redis] = None


def get_redis_client() -> Optional[redis.Redis]:
    """Get or create Redis client."""
    global _redis_client

    if _redis_client is not None:
        return _redis_client

    if not settings.redis_url:
        logger.debug("redis_not_configured")
        return None

    try:
        client = redis.from_url(
            settings.redis_url,
            decode_responses=True,
            socket_timeout=5,
            socket_connect_timeout=5,
        )
        client.ping()
        logger.info("redis_connected")
        _redis_client = client
        return _redis_client
    except redis.RedisError as e:
        logger.warning("redis_connection_failed", error=str(e))
        return None


class CacheService:
    """
    JSON cache with TTL.

    Cache Keys:
    - genres:all -> genre list (TTL: genre_cache_ttl_seconds)
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None):
        self.redis = redis_client
        # key -> (expires_at, payload)
        self._memory_cache: Dict[str, Tuple[float, str]] = {}

    def _is_available(self) -> bool:
        return self.redis is not None

    async def get_json(self, key: str) -> Optional[Any]:
        raw: Optional[str] = None
        if self._is_available():
            try:
                raw = self.redis.get(key)
            except redis.RedisError as e:
                logger.warning("cache_get_failed", key=key, error=str(e))
        else:
            cached = self._memory_cache.get(key)
            if cached and cached[0] > time.time():
                raw = cached[1]
        return json.loads(raw) if raw else None

    async def set_json(self, key: str, value: Any, ttl: int) -> None:
        payload = json.dumps(value, default=str)
        if self._is_available():
            try:
                self.redis.setex(key, ttl, payload)
                return
            except redis.RedisError as e:
                logger.warning("cache_set_failed", key=key, error=str(e))
        self._memory_cache[key] = (time.time() + ttl, payload)

    async def delete(self, key: str) -> None:
        self._memory_cache.pop(key, None)
        if self._is_available():
            try:
                self.redis.delete(key)
            except redis.RedisError as e:
                logger.warning("cache_delete_failed", key=key, error=str(e))


# Singleton
_cache_service: Optional[CacheService] = None


def get_cache_service() -> CacheService:
    """Get singleton CacheService instance."""
    global _cache_service
    if _cache_service is None:
        _cache_service = CacheService(get_redis_client())
    return _cache_service
