"""
Google Drive — MOCK client.

⚠️  In-memory folder tree for development and testing.
    Implements the same listing/content interfaces as GoogleDriveClient,
    counts every call, and can be told to fail for chosen file ids.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Dict, List, Optional, Set

from drive_catalog.integrations.contracts.errors import ContentFetchError, ListingError
from drive_catalog.integrations.contracts.interfaces import (
    FOLDER_MIME_TYPE,
    ChildKind,
    ContentFetchProvider,
    ContentStream,
    FolderListingProvider,
)

logger = logging.getLogger(__name__)


@dataclass
class _Node:
    id: str
    name: str
    mime_type: str
    parent_id: Optional[str]
    content: bytes = b""
    trashed: bool = False
    children: List[str] = field(default_factory=list)


class InMemoryDrive(FolderListingProvider, ContentFetchProvider):
    """
    Mock Drive.

    Parameters
    ----------
    root_id : str
        Identifier of the root folder created on construction.
    chunk_size : int
        Size of the chunks yielded by open_content. Default 4096.
    """

    def __init__(self, root_id: str = "root", chunk_size: int = 4096):
        self.root_id = root_id
        self._chunk_size = chunk_size
        self._nodes: Dict[str, _Node] = {
            root_id: _Node(id=root_id, name="root", mime_type=FOLDER_MIME_TYPE, parent_id=None)
        }
        self._counter = 0

        self.list_calls: List[tuple] = []
        self.content_calls: List[str] = []
        self.metadata_calls: List[str] = []
        self.closed_streams: List[str] = []
        self.failing_ids: Set[str] = set()

    # ------------------------------------------------------------------
    # Tree building
    # ------------------------------------------------------------------

    def _new_id(self, prefix: str) -> str:
        self._counter += 1
        return f"{prefix}-{self._counter}"

    def _add(self, parent_id: str, node: _Node) -> str:
        if parent_id not in self._nodes:
            raise KeyError(f"[DRIVE MOCK] Unknown parent folder '{parent_id}'")
        self._nodes[node.id] = node
        self._nodes[parent_id].children.append(node.id)
        return node.id

    def add_folder(self, parent_id: str, name: str, folder_id: Optional[str] = None, trashed: bool = False) -> str:
        node = _Node(
            id=folder_id or self._new_id("folder"),
            name=name,
            mime_type=FOLDER_MIME_TYPE,
            parent_id=parent_id,
            trashed=trashed,
        )
        return self._add(parent_id, node)

    def add_file(
        self,
        parent_id: str,
        name: str,
        content: bytes = b"\x89PNG",
        mime_type: str = "image/jpeg",
        file_id: Optional[str] = None,
        trashed: bool = False,
    ) -> str:
        node = _Node(
            id=file_id or self._new_id("file"),
            name=name,
            mime_type=mime_type,
            parent_id=parent_id,
            content=content,
            trashed=trashed,
        )
        return self._add(parent_id, node)

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    async def list_files(self, parent_id: str, kind: ChildKind) -> List[Dict[str, Any]]:
        self.list_calls.append((parent_id, kind))
        if parent_id in self.failing_ids or parent_id not in self._nodes:
            raise ListingError(f"[DRIVE MOCK] Cannot list folder '{parent_id}'", payload={"parent_id": parent_id})

        out = []
        for child_id in self._nodes[parent_id].children:
            child = self._nodes[child_id]
            if child.trashed:
                continue
            is_folder = child.mime_type == FOLDER_MIME_TYPE
            if is_folder != (kind == ChildKind.FOLDER):
                continue
            entry = {"id": child.id, "name": child.name}
            if kind == ChildKind.NON_FOLDER:
                entry["mimeType"] = child.mime_type
            out.append(entry)
        return out

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def _file(self, file_id: str) -> _Node:
        node = self._nodes.get(file_id)
        if file_id in self.failing_ids or node is None or node.mime_type == FOLDER_MIME_TYPE:
            raise ContentFetchError(f"[DRIVE MOCK] Cannot read file '{file_id}'", payload={"file_id": file_id})
        return node

    async def get_metadata(self, file_id: str) -> Dict[str, Any]:
        self.metadata_calls.append(file_id)
        node = self._file(file_id)
        return {"name": node.name, "mimeType": node.mime_type}

    async def open_content(self, file_id: str) -> ContentStream:
        self.content_calls.append(file_id)
        node = self._file(file_id)
        logger.debug("[DRIVE MOCK] Opening %s (%d bytes)", file_id, len(node.content))

        async def chunks() -> AsyncIterator[bytes]:
            for start in range(0, len(node.content), self._chunk_size):
                yield node.content[start:start + self._chunk_size]

        async def close() -> None:
            self.closed_streams.append(file_id)

        return ContentStream(mime_type=node.mime_type, chunks=chunks(), size=len(node.content), close=close)
