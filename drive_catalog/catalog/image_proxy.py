from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from drive_catalog.catalog.cache_aside import cache_read, cache_write
from drive_catalog.integrations.contracts.interfaces import ContentFetchProvider, ContentStream, KeyValueCache
from drive_catalog.utils.catalog_config_loader import CacheConfig

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"


class ImageProxy:
    """Streams Drive files straight to the client, caching their MIME type."""

    def __init__(self, cache: KeyValueCache, content: ContentFetchProvider, cache_cfg: Optional[CacheConfig] = None):
        self.cache = cache
        self.content = content
        self.cache_cfg = cache_cfg or CacheConfig()

    async def mime_type(self, file_id: str) -> str:
        key = f"{self.cache_cfg.image_meta_key_prefix}{file_id}"
        cached = await cache_read(self.cache, key, self.cache_cfg.fail_open)
        if cached:
            logger.info("Cache hit for image meta %s", file_id)
            return cached

        logger.info("Fetching Google Drive meta for %s", file_id)
        meta = await self.content.get_metadata(file_id)
        mime = meta.get("mimeType") or DEFAULT_MIME_TYPE
        await cache_write(self.cache, key, mime, self.cache_cfg.image_meta_ttl_seconds)
        return mime

    async def open_image(self, file_id: str) -> ContentStream:
        mime = await self.mime_type(file_id)
        stream = await self.content.open_content(file_id)
        return replace(stream, mime_type=mime)
