from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class ChildKind(str, Enum):
    FOLDER = "FOLDER"
    NON_FOLDER = "NON_FOLDER"


FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

_EXTENSION_RE = re.compile(r"\.[^/.]+$")


# ---------------------------------------------------------------------------
# Shared data models
# ---------------------------------------------------------------------------

@dataclass
class FolderRef:
    id: str
    name: str


@dataclass
class AssetRef:
    id: str
    name: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class Product:
    id: str
    name: str                            # display name without extension
    category: str
    range: str
    price: str
    image: str                           # resolved public CDN URL


@dataclass
class SubfolderEntry:
    id: str
    name: str
    preview: List[Product] = field(default_factory=list)
    all: List[Product] = field(default_factory=list)


@dataclass
class CategoryEntry:
    id: str
    name: str
    subfolders: List[SubfolderEntry] = field(default_factory=list)


Catalog = List[CategoryEntry]


@dataclass
class ContentStream:
    """
    Binary content of a remote file, consumed chunk by chunk.

    The owner must call ``aclose()`` once done with the stream, whether or not
    the chunks were read, so the underlying connection is released.
    """
    mime_type: str
    chunks: AsyncIterator[bytes]
    size: Optional[int] = None
    close: Optional[Callable[[], Awaitable[None]]] = field(default=None, repr=False)

    async def aclose(self) -> None:
        if self.close is not None:
            await self.close()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def strip_extension(name: str) -> str:
    """Drop the last ``.ext`` suffix: ``dress-01.jpg`` -> ``dress-01``."""
    return _EXTENSION_RE.sub("", name)


def catalog_to_json(catalog: Catalog) -> List[Dict[str, Any]]:
    return [asdict(category) for category in catalog]


# ---------------------------------------------------------------------------
# Abstract collaborator interfaces
# ---------------------------------------------------------------------------

class FolderListingProvider(ABC):
    """Lists the children of a remote folder."""

    @abstractmethod
    async def list_files(self, parent_id: str, kind: ChildKind) -> List[Dict[str, Any]]:
        """Return raw child entries (``id``, ``name``, ``mimeType``), trashed entries excluded."""


class ContentFetchProvider(ABC):
    """Reads file content and metadata from the remote provider."""

    @abstractmethod
    async def open_content(self, file_id: str) -> ContentStream:
        """Open the binary content of a file as a stream."""

    @abstractmethod
    async def get_metadata(self, file_id: str) -> Dict[str, Any]:
        """Return ``name`` and ``mimeType`` of a file."""


class AssetSink(ABC):
    """CDN upload target. Re-uploading the same public_id replaces the object."""

    @abstractmethod
    async def upload(self, stream: ContentStream, *, folder: str, public_id: str) -> str:
        """Upload the stream and return its secure public URL."""


class KeyValueCache(ABC):
    """Key-value cache with per-entry TTL. Values are JSON-serializable."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Any]:
        """Return the stored value, or None when absent or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Store a value that expires after ``ttl`` seconds."""

    @abstractmethod
    async def ping(self) -> bool:
        """Report whether the backend is reachable."""
