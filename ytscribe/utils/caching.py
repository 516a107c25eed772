"""
Document cache stores for transcripts and summaries.

Records are JSON documents addressed by string keys. Two backends are
available: Redis for deployments and an in-process dictionary for tests and
local runs.
"""

import json
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ytscribe.core.exceptions import StoreError
from ytscribe.utils.logger import logging


class WriteMode(str, Enum):
    """How a write combines with an existing record."""
    OVERWRITE = "overwrite"
    MERGE = "merge"


def _serialize(key: str, value: Dict[str, Any]) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as e:
        raise StoreError(f"Error serializing value for key {key}") from e


class CacheStore(ABC):
    """Get/set-by-key document store with merge support."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        """Return the record stored under ``key`` or None."""

    @abstractmethod
    async def set(self, key: str, record: Dict[str, Any], mode: WriteMode = WriteMode.OVERWRITE) -> None:
        """Store ``record`` under ``key``; MERGE updates the top-level fields of an existing record."""

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        pass


class MemoryCacheStore(CacheStore):
    """In-process store; values are kept serialized so callers never share dicts."""

    def __init__(self):
        self._memory_cache: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        value = self._memory_cache.get(key)
        return json.loads(value) if value is not None else None

    async def set(self, key: str, record: Dict[str, Any], mode: WriteMode = WriteMode.OVERWRITE) -> None:
        if mode is WriteMode.MERGE and key in self._memory_cache:
            merged = json.loads(self._memory_cache[key])
            merged.update(record)
            record = merged
        self._memory_cache[key] = _serialize(key, record)

    def clear(self):
        """Clear the in-memory cache."""
        self._memory_cache = {}


class RedisCacheStore(CacheStore):
    """Redis-backed store. Writes are last-writer-wins per key."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self._redis_client = client or redis.from_url(redis_url, decode_responses=True)

    async def get(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            value = await self._redis_client.get(key)
        except RedisError as e:
            logging.error(f"Redis error in cache get for {key}: {e}")
            raise StoreError(f"Cache read failed for {key}") from e
        return json.loads(value) if value else None

    async def set(self, key: str, record: Dict[str, Any], mode: WriteMode = WriteMode.OVERWRITE) -> None:
        try:
            if mode is WriteMode.MERGE:
                existing = await self._redis_client.get(key)
                if existing:
                    merged = json.loads(existing)
                    merged.update(record)
                    record = merged
            await self._redis_client.set(key, _serialize(key, record))
        except RedisError as e:
            logging.error(f"Redis error in cache set for {key}: {e}")
            raise StoreError(f"Cache write failed for {key}") from e

    async def ping(self) -> bool:
        try:
            return bool(await self._redis_client.ping())
        except RedisError as e:
            logging.error(f"Redis ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._redis_client.aclose()


def create_cache_store(redis_url: Optional[str] = None) -> CacheStore:
    """
    Build the cache store for the process.

    Args:
        redis_url: Redis connection URL; the in-memory store is used when empty

    Returns:
        A cache store instance
    """
    if redis_url:
        logging.info("Using Redis cache store")
        return RedisCacheStore(redis_url)
    logging.info("REDIS_URL not set, using in-memory cache store")
    return MemoryCacheStore()
