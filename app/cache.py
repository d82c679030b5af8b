"""
Travel Planner Backend — Cache Layer
======================================

What:  Key → JSON value store with a per-key time-to-live.
Why:   Country reference data changes rarely; caching keeps repeated listings
       and lookups off the database.
How:   CacheBackend defines the contract. MemoryCache wraps aiocache's in-process
       memory backend for single-process deployments and tests; RedisCache shares entries
       across workers through redis.asyncio.
Who:   Built in the lifespan handler and injected into CountryService.

Contract:
    get(key)                      → value or None
    set(key, value, ttl_seconds)  → None
    delete(key)                   → None

    Values are JSON-compatible Python objects (dicts, lists, scalars). Both
    backends store the serialized text and decode on read, so callers always
    receive a fresh copy.

Failure policy:
    Library errors (redis.RedisError, connection errors) are wrapped in
    UpstreamServiceError(service="cache") and raised. There is no silent
    cache bypass; the caller decides what a failed cache means.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import redis.asyncio as redis
from aiocache import Cache
from aiocache.serializers import JsonSerializer

from app.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class CacheBackend(ABC):
    """Abstract interface for the cache sitting in front of the store."""

    name: str = "cache"

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        ...

    @abstractmethod
    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        ...

    @abstractmethod
    async def delete(self, key: str) -> None:
        ...

    async def ping(self) -> bool:
        """Lightweight availability check used by the health route."""
        return True

    async def close(self) -> None:
        """Release connections. Called once at shutdown."""
        return None


class MemoryCache(CacheBackend):
    """
    In-process cache on aiocache's memory backend.

    aiocache schedules a loop timer per key on `set`, so an entry is evicted
    when its TTL lapses whether or not anyone reads it again. One-off filter
    keys therefore do not accumulate.

    Not shared between worker processes. Use RedisCache when running more
    than one uvicorn worker.
    """

    name = "memory"

    def __init__(self, namespace: str = "travel_planner"):
        self._cache = Cache(Cache.MEMORY, serializer=JsonSerializer(), namespace=namespace)

    async def get(self, key: str) -> Optional[Any]:
        return await self._cache.get(key)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        await self._cache.set(key, value, ttl=ttl_seconds)

    async def delete(self, key: str) -> None:
        await self._cache.delete(key)

    async def size(self) -> int:
        """Number of live entries."""
        return len(await self._cache.raw("keys"))

    async def close(self) -> None:
        await self._cache.clear()
        await self._cache.close()


class RedisCache(CacheBackend):
    """
    Redis-backed cache using SETEX for TTL enforcement.

    Redis owns eviction: entries disappear when their TTL lapses, and the
    server's maxmemory policy applies on top.
    """

    name = "redis"

    def __init__(self, client: "redis.Redis"):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisCache":
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            health_check_interval=30,
        )
        return cls(client)

    async def get(self, key: str) -> Optional[Any]:
        try:
            payload = await self._client.get(key)
        except (redis.RedisError, OSError) as e:
            raise UpstreamServiceError("cache", context={"op": "get", "key": key}) from e
        if payload is None:
            return None
        return json.loads(payload)

    async def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        try:
            await self._client.setex(key, ttl_seconds, json.dumps(value))
        except (redis.RedisError, OSError) as e:
            raise UpstreamServiceError("cache", context={"op": "set", "key": key}) from e

    async def delete(self, key: str) -> None:
        try:
            await self._client.delete(key)
        except (redis.RedisError, OSError) as e:
            raise UpstreamServiceError("cache", context={"op": "delete", "key": key}) from e

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except (redis.RedisError, OSError) as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def close(self) -> None:
        await self._client.aclose()


def build_cache(redis_url: str) -> CacheBackend:
    """Select the cache backend from configuration (empty URL → memory)."""
    if redis_url:
        logger.info("Using Redis cache")
        return RedisCache.from_url(redis_url)
    logger.info("REDIS_URL not set; using in-process memory cache")
    return MemoryCache()
