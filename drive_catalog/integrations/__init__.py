"""
Integrations layer.
This package contains all code used to communicate with external systems:
- Google Drive (folder listing, file content and metadata)
- Cloudinary (image mirroring)
- Redis (cache backend lives in drive_catalog.database)

Key rule:
- The catalog core MUST NOT call external APIs directly.
- It calls integration clients through the interfaces in contracts/interfaces.py.
- Mock clients are used locally and swapped for REAL_HTTP clients when credentials are set.

Switching implementations:
- The selection of mock vs real clients happens in ONE place (drive_catalog/api/main.py).
"""

from .contracts.errors import (
    CacheBackendError,
    CatalogBuildError,
    ContentFetchError,
    IntegrationError,
    ListingError,
    UploadError,
)
from .contracts.interfaces import (
    AssetRef,
    AssetSink,
    Catalog,
    CategoryEntry,
    ChildKind,
    ContentFetchProvider,
    ContentStream,
    FolderListingProvider,
    FolderRef,
    KeyValueCache,
    Product,
    SubfolderEntry,
    catalog_to_json,
    strip_extension,
)

__all__ = [
    # interfaces
    "AssetRef", "AssetSink", "Catalog", "CategoryEntry", "ChildKind",
    "ContentFetchProvider", "ContentStream", "FolderListingProvider",
    "FolderRef", "KeyValueCache", "Product", "SubfolderEntry",
    "catalog_to_json", "strip_extension",
    # errors
    "CacheBackendError", "CatalogBuildError", "ContentFetchError",
    "IntegrationError", "ListingError", "UploadError",
]
