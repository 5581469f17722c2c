"""JSON values stored in Redis under a namespaced key.

One client (and its connection pool) is shared by the process, created on
first use and closed during application shutdown. Redis failures surface as
``CacheUnavailableError`` so the API reports them like any other error.
"""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import orjson
import redis.asyncio as aioredis
from loguru import logger
from redis.exceptions import RedisError

from src.core.config import get_settings
from src.core.exceptions import CacheUnavailableError, ValidationError
from src.core.types import JsonValue

# Redis TTL replies for keys without expiry and missing keys
_TTL_NO_EXPIRY = -1
_TTL_MISSING = -2


@dataclass(frozen=True, slots=True)
class CachedEntry:
    key: str
    value: JsonValue
    ttl_seconds: int | None


class _CacheManager:
    """Holds the process wide Redis client."""

    def __init__(self) -> None:
        self._client: aioredis.Redis | None = None
        self._lock = threading.Lock()

    def get_client(self) -> aioredis.Redis:
        if self._client is None:
            with self._lock:
                if self._client is None:
                    config = get_settings().cache_config
                    self._client = aioredis.from_url(
                        config.redis_url,
                        decode_responses=True,
                        socket_timeout=config.socket_timeout,
                    )
                    logger.info("Created Redis client")
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("Redis client closed")
        self._client = None


_cache_manager = _CacheManager()


def get_redis_client() -> aioredis.Redis:
    """Return the shared Redis client, creating it on first use."""
    return _cache_manager.get_client()


async def close_cache() -> None:
    """Close the shared Redis client and its connections."""
    await _cache_manager.close()


class CacheService:
    """Get, set and delete JSON values in Redis.

    Args:
        client: Redis client created with ``decode_responses=True``.
        key_prefix: Namespace prepended to every key.
    """

    def __init__(self, client: aioredis.Redis, key_prefix: str = "") -> None:
        self._client = client
        self._key_prefix = key_prefix

    def _key(self, key: str) -> str:
        if not key or not key.strip():
            raise ValidationError("Cache key must not be empty")
        return f"{self._key_prefix}{key}"

    @asynccontextmanager
    async def _redis_call(self, operation: str, key: str) -> AsyncGenerator[None]:
        try:
            yield
        except RedisError as e:
            logger.error("Redis {} failed for key {}: {}", operation, key, e)
            raise CacheUnavailableError(
                context={"operation": operation, "key": key}, cause=e
            ) from e

    async def set(
        self, key: str, value: JsonValue, ttl_seconds: int | None = None
    ) -> None:
        """Store ``value`` as JSON, expiring after ``ttl_seconds`` when positive."""
        full_key = self._key(key)
        payload = orjson.dumps(value).decode()
        expiry = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        async with self._redis_call("set", key):
            await self._client.set(full_key, payload, ex=expiry)
        logger.debug("Cached key {} (ttl={})", key, expiry)

    async def get(self, key: str) -> JsonValue | None:
        """Return the decoded value, or None when the key is missing."""
        entry = await self.get_entry(key)
        return entry.value if entry else None

    async def get_entry(self, key: str) -> CachedEntry | None:
        """Return the value together with its remaining time to live."""
        full_key = self._key(key)
        async with self._redis_call("get", key):
            raw = await self._client.get(full_key)
            if raw is None:
                return None
            ttl = await self._client.ttl(full_key)

        if ttl == _TTL_MISSING:
            return None
        try:
            value: JsonValue = orjson.loads(raw)
        except orjson.JSONDecodeError:
            # Written by something other than this service
            value = raw
        return CachedEntry(
            key=key,
            value=value,
            ttl_seconds=None if ttl == _TTL_NO_EXPIRY else int(ttl),
        )

    async def exists(self, key: str) -> bool:
        full_key = self._key(key)
        async with self._redis_call("exists", key):
            return bool(await self._client.exists(full_key))

    async def remove(self, key: str) -> bool:
        """Delete ``key``; returns whether anything was removed."""
        full_key = self._key(key)
        async with self._redis_call("delete", key):
            removed = await self._client.delete(full_key)
        return bool(removed)


def get_cache_service() -> CacheService:
    """FastAPI dependency returning a cache service on the shared client."""
    return CacheService(get_redis_client(), get_settings().cache_config.key_prefix)
