from __future__ import annotations

from typing import List, Union

from drive_catalog.integrations.contracts.interfaces import (
    AssetRef,
    ChildKind,
    FolderListingProvider,
    FolderRef,
)


class RemoteTreeLister:
    """Lists the immediate folder or file children of a remote folder."""

    def __init__(self, provider: FolderListingProvider):
        self.provider = provider

    async def list_children(self, parent_id: str, kind: ChildKind) -> List[Union[FolderRef, AssetRef]]:
        # Provider errors propagate unchanged; no retry, no caching here.
        entries = await self.provider.list_files(parent_id, kind)
        if kind == ChildKind.FOLDER:
            return [FolderRef(id=e["id"], name=e["name"]) for e in entries]
        return [AssetRef(id=e["id"], name=e["name"], mime_type=e.get("mimeType")) for e in entries]

    async def list_folders(self, parent_id: str) -> List[FolderRef]:
        return await self.list_children(parent_id, ChildKind.FOLDER)  # type: ignore[return-value]

    async def list_assets(self, parent_id: str) -> List[AssetRef]:
        return await self.list_children(parent_id, ChildKind.NON_FOLDER)  # type: ignore[return-value]
