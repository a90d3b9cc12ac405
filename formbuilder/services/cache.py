"""
Cache Service Singleton - Form Builder API
formbuilder/services/cache.py

Provides a singleton Redis cache instance, key helpers and TTL constants.
Gracefully handles Redis unavailability.
"""
import logging
from typing import Optional
from uuid import UUID

import redis

from formbuilder.config import settings
from formbuilder.services.redis_cache import RedisCache

logger = logging.getLogger(__name__)

TTL_FORM = settings.CACHE_TTL_FORM
TTL_SHARED_FORM = settings.CACHE_TTL_SHARED_FORM

# Singleton instance
_cache: Optional[RedisCache] = None


def form_key(form_id: UUID) -> str:
    return f"form:{form_id}"


def shared_form_key(share_id: str) -> str:
    return f"form:share:{share_id}"


def get_cache() -> Optional[RedisCache]:
    """
    Get or create Redis cache instance.

    Returns:
        RedisCache instance if Redis is available, None otherwise.

    Note:
        Returns None if Redis is unavailable, allowing the application
        to continue functioning without caching (graceful degradation).
    """
    global _cache
    if _cache is None:
        try:
            _cache = RedisCache()
            _cache.client.ping()  # Test connection
        except (redis.RedisError, ConnectionError) as e:
            logger.warning("redis_unavailable: %s", e)
            _cache = None
    return _cache


def invalidate_form(form_id: UUID, share_id: Optional[str] = None) -> None:
    """Drop cached copies of a form after it changes."""
    cache = get_cache()
    if not cache:
        return
    keys = [form_key(form_id)]
    if share_id:
        keys.append(shared_form_key(share_id))
    try:
        cache.delete(*keys)
    except redis.RedisError as e:
        logger.warning("cache_invalidation_failed form_id=%s: %s", form_id, e)


def reset_cache() -> None:
    """
    Reset the cache singleton.

    Useful for testing or when Redis connection needs to be re-established.
    """
    global _cache
    _cache = None
