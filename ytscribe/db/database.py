"""
Cache store lifecycle for the transcript service.

The store is created once at startup, kept on the application state and
wrapped by the transcript service built around it.
"""

from typing import Optional

from ytscribe.config import config
from ytscribe.utils.caching import CacheStore, create_cache_store
from ytscribe.utils.logger import logging


async def init_db(redis_url: Optional[str] = config.REDIS_URL) -> CacheStore:
    """Create the cache store and check that it answers."""
    store = create_cache_store(redis_url)
    if not await store.ping():
        logging.warning("Cache store did not answer ping; requests will fail on cache access")
    return store


async def close_db(store: CacheStore) -> None:
    await store.close()

