"""
Cloudinary — MOCK client.

⚠️  Consumes the uploaded stream, keeps the bytes in memory and returns a
    deterministic URL derived from folder and public_id. Re-uploading a
    public_id replaces the stored object, as Cloudinary does with overwrite.
"""

import logging
from typing import Dict, List, Set

from drive_catalog.integrations.contracts.errors import UploadError
from drive_catalog.integrations.contracts.interfaces import AssetSink, ContentStream

logger = logging.getLogger(__name__)


class InMemoryAssetSink(AssetSink):
    def __init__(self, base_url: str = "https://res.cloudinary.example/demo/image/upload"):
        self.base_url = base_url.rstrip("/")
        self.objects: Dict[str, bytes] = {}
        self.uploads: List[str] = []
        self.failing_ids: Set[str] = set()

    async def upload(self, stream: ContentStream, *, folder: str, public_id: str) -> str:
        self.uploads.append(public_id)
        data = bytearray()
        async for chunk in stream.chunks:
            data.extend(chunk)
        if public_id in self.failing_ids:
            raise UploadError(f"[CDN MOCK] Upload rejected for '{public_id}'", payload={"public_id": public_id})

        key = f"{folder}/{public_id}"
        self.objects[key] = bytes(data)
        logger.info("[CDN MOCK] Stored %s (%d bytes)", key, len(data))
        return f"{self.base_url}/{key}"
