"""
Asset mirroring: Drive file -> CDN URL, cached per asset.
"""

from __future__ import annotations

import logging
from typing import Optional

from drive_catalog.catalog.cache_aside import cache_read, cache_write
from drive_catalog.catalog.single_flight import SingleFlight
from drive_catalog.integrations.contracts.interfaces import AssetSink, ContentFetchProvider, KeyValueCache
from drive_catalog.utils.catalog_config_loader import CacheConfig, CDNConfig

logger = logging.getLogger(__name__)


class AssetMirror:
    def __init__(
        self,
        cache: KeyValueCache,
        content: ContentFetchProvider,
        sink: AssetSink,
        cache_cfg: Optional[CacheConfig] = None,
        cdn_cfg: Optional[CDNConfig] = None,
    ):
        self.cache = cache
        self.content = content
        self.sink = sink
        self.cache_cfg = cache_cfg or CacheConfig()
        self.cdn_cfg = cdn_cfg or CDNConfig()
        self._flight = SingleFlight(cancel_when_abandoned=True)

    def cache_key(self, asset_id: str) -> str:
        return f"{self.cache_cfg.asset_key_prefix}{asset_id}"

    async def resolve_asset_url(self, asset_id: str, asset_name: str) -> str:
        """
        Return the CDN URL of a Drive file, uploading it on first access.

        A cached URL short-circuits without any upstream call. On a miss the
        file is streamed from Drive into the CDN under a stable public id
        (the Drive file id) and the resulting URL is cached. Failures are not
        cached, so the next call retries from scratch. Concurrent calls for
        the same asset share a single upload, and an upload is cancelled once
        every caller waiting on it has been cancelled.
        """
        key = self.cache_key(asset_id)
        cached = await cache_read(self.cache, key, self.cache_cfg.fail_open)
        if cached:
            return cached
        return await self._flight.do(key, lambda: self._mirror(asset_id, asset_name, key))

    async def _mirror(self, asset_id: str, asset_name: str, key: str) -> str:
        # A previous flight may have finished while our cache read was pending
        cached = await cache_read(self.cache, key, self.cache_cfg.fail_open)
        if cached:
            return cached

        logger.info("Uploading %s (%s) to CDN folder %s", asset_id, asset_name, self.cdn_cfg.folder)
        stream = await self.content.open_content(asset_id)
        try:
            url = await self.sink.upload(stream, folder=self.cdn_cfg.folder, public_id=asset_id)
        finally:
            await stream.aclose()
        await cache_write(self.cache, key, url, self.cache_cfg.asset_url_ttl_seconds)
        return url
