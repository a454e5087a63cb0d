"""
Cache read/write helpers shared by the catalog, asset and image caches.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from drive_catalog.integrations.contracts.errors import CacheBackendError
from drive_catalog.integrations.contracts.interfaces import KeyValueCache

logger = logging.getLogger(__name__)


async def cache_read(cache: KeyValueCache, key: str, fail_open: bool = True) -> Optional[Any]:
    """Read a key. With fail_open a backend failure counts as a miss."""
    try:
        return await cache.get(key)
    except CacheBackendError as e:
        if not fail_open:
            raise
        logger.warning("Cache read failed for %s, treating as miss: %s", key, e)
        return None


async def cache_write(cache: KeyValueCache, key: str, value: Any, ttl: int) -> bool:
    """Write a key. A backend failure is logged and reported as False."""
    try:
        await cache.set(key, value, ttl)
        return True
    except CacheBackendError as e:
        logger.warning("Cache write failed for %s: %s", key, e)
        return False
