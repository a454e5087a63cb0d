"""
Catalog assembly: root -> categories -> subfolders -> products.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, TypeVar

from drive_catalog.catalog.asset_mirror import AssetMirror
from drive_catalog.catalog.lister import RemoteTreeLister
from drive_catalog.integrations.contracts.interfaces import (
    AssetRef,
    Catalog,
    CategoryEntry,
    FolderRef,
    Product,
    SubfolderEntry,
    strip_extension,
)
from drive_catalog.utils.catalog_config_loader import CatalogSettings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CatalogAssembler:
    """
    Walks the Drive tree and shapes it into a Catalog.

    Every file is resolved through the AssetMirror. Output follows listing
    order at every level. Any failure aborts the whole build; a partial
    catalog is never returned.

    With ``max_concurrency`` 1 (the default) every remote call is issued
    strictly one after another in tree order. Higher values resolve
    independent subtrees concurrently while keeping at most that many
    listing/upload calls in flight.
    """

    def __init__(self, lister: RemoteTreeLister, mirror: AssetMirror, settings: Optional[CatalogSettings] = None):
        self.lister = lister
        self.mirror = mirror
        self.settings = settings or CatalogSettings()
        self._limit = asyncio.Semaphore(self.settings.max_concurrency)

    @property
    def sequential(self) -> bool:
        return self.settings.max_concurrency <= 1

    async def build_catalog(self, root_id: str) -> Catalog:
        categories = await self._remote(self.lister.list_folders, root_id)
        logger.debug("Found %d categories under %s", len(categories), root_id)
        return await self._map(categories, self._build_category)

    async def _build_category(self, category: FolderRef) -> CategoryEntry:
        subfolders = await self._remote(self.lister.list_folders, category.id)
        entries = await self._map(subfolders, self._build_subfolder)
        return CategoryEntry(id=category.id, name=category.name, subfolders=entries)

    async def _build_subfolder(self, subfolder: FolderRef) -> SubfolderEntry:
        assets = await self._remote(self.lister.list_assets, subfolder.id)
        products = await self._map(assets, self._build_product)
        return SubfolderEntry(
            id=subfolder.id,
            name=subfolder.name,
            preview=products[: self.settings.preview_size],
            all=products,
        )

    async def _build_product(self, asset: AssetRef) -> Product:
        url = await self._remote(self.mirror.resolve_asset_url, asset.id, asset.name)
        return Product(
            id=asset.id,
            name=strip_extension(asset.name),
            category=self.settings.default_category,
            range=self.settings.default_range,
            price=self.settings.default_price,
            image=url,
        )

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    async def _remote(self, fn: Callable[..., Awaitable[T]], *args) -> T:
        async with self._limit:
            return await fn(*args)

    async def _map(self, items: list, build: Callable[..., Awaitable[T]]) -> List[T]:
        if self.sequential:
            return [await build(item) for item in items]

        tasks = [asyncio.ensure_future(build(item)) for item in items]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
