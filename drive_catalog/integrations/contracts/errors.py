"""
Integration errors.

Every external call made by the catalog core fails with one of these, so the
core and the API layer never have to know about httpx or redis exceptions.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class IntegrationError(Exception):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class ListingError(IntegrationError):
    """Folder listing failed (network, auth, not found)."""


class ContentFetchError(IntegrationError):
    """Reading a file's content or metadata failed."""


class UploadError(IntegrationError):
    """The CDN rejected or failed an upload."""


class CacheBackendError(IntegrationError):
    """The key-value cache could not be read or written."""


class CatalogBuildError(Exception):
    """Generic failure surfaced to callers of the catalog service."""
