"""
Cache-aside catalog service.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional

from drive_catalog.catalog.assembler import CatalogAssembler
from drive_catalog.catalog.cache_aside import cache_read, cache_write
from drive_catalog.catalog.single_flight import SingleFlight
from drive_catalog.integrations.contracts.errors import CacheBackendError, CatalogBuildError
from drive_catalog.integrations.contracts.interfaces import KeyValueCache, catalog_to_json
from drive_catalog.utils.catalog_config_loader import CacheConfig

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(
        self,
        cache: KeyValueCache,
        assembler: CatalogAssembler,
        root_folder_id: str,
        cache_cfg: Optional[CacheConfig] = None,
    ):
        self.cache = cache
        self.assembler = assembler
        self.root_folder_id = root_folder_id
        self.cache_cfg = cache_cfg or CacheConfig()
        self._flight = SingleFlight()

    async def get_catalog(self) -> List[Dict[str, Any]]:
        """
        Return the catalog as JSON-ready data.

        A cached catalog is returned verbatim. On a miss the tree is rebuilt
        and written to the cache once, after it is complete. Concurrent misses
        wait for the same rebuild. Raises CatalogBuildError on any failure.
        """
        key = self.cache_cfg.catalog_key
        try:
            cached = await cache_read(self.cache, key, self.cache_cfg.fail_open)
        except CacheBackendError as e:
            logger.error("Catalog cache unavailable: %s", e)
            raise CatalogBuildError("Error fetching catalog") from e

        if cached is not None:
            logger.info("Cache hit for catalog")
            return cached

        logger.info("Cache miss - fetching from Google Drive")
        return await self._flight.do(key, self._rebuild)

    async def _rebuild(self) -> List[Dict[str, Any]]:
        started = time.monotonic()
        try:
            catalog = await self.assembler.build_catalog(self.root_folder_id)
        except Exception as e:
            logger.error("Error building catalog: %s", e)
            raise CatalogBuildError("Error fetching catalog") from e

        payload = catalog_to_json(catalog)
        await cache_write(self.cache, self.cache_cfg.catalog_key, payload, self.cache_cfg.catalog_ttl_seconds)
        logger.info("Catalog rebuilt in %.2fs (%d categories)", time.monotonic() - started, len(payload))
        return payload
