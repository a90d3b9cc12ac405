"""
Services module for the Form Builder API.
"""

from formbuilder.services.cache import get_cache
from formbuilder.services.redis_cache import RedisCache
from formbuilder.services.snowflake import get_snowflake_connection

__all__ = ["get_cache", "RedisCache", "get_snowflake_connection"]
