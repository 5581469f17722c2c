"""Redis backed key/value cache."""

from src.infrastructure.cache.redis_cache import (
    CachedEntry,
    CacheService,
    close_cache,
    get_cache_service,
    get_redis_client,
)

__all__ = [
    "CacheService",
    "CachedEntry",
    "close_cache",
    "get_cache_service",
    "get_redis_client",
]
