"""
Google Drive HTTP Client.

Talks to the Drive REST API v3 with a read-only service account:
- lists folder children (folders or non-folders, trashed entries excluded)
- streams file content (alt=media) without buffering it in memory
- reads file metadata (name, mimeType)

This client is the ONLY place that talks to Google Drive.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from drive_catalog.integrations.contracts.errors import ContentFetchError, ListingError
from drive_catalog.integrations.contracts.interfaces import (
    FOLDER_MIME_TYPE,
    ChildKind,
    ContentFetchProvider,
    ContentStream,
    FolderListingProvider,
)

logger = logging.getLogger(__name__)

DRIVE_API_URL = "https://www.googleapis.com/drive/v3"
DRIVE_SCOPES = ["https://www.googleapis.com/auth/drive.readonly"]

_SPLIT_CREDENTIAL_ENV = {
    "type": "GOOGLE_TYPE",
    "project_id": "GOOGLE_PROJECT_ID",
    "private_key_id": "GOOGLE_PRIVATE_KEY_ID",
    "private_key": "GOOGLE_PRIVATE_KEY",
    "client_email": "GOOGLE_CLIENT_EMAIL",
    "client_id": "GOOGLE_CLIENT_ID",
    "auth_uri": "GOOGLE_AUTH_URI",
    "token_uri": "GOOGLE_TOKEN_URI",
    "auth_provider_x509_cert_url": "GOOGLE_AUTH_PROVIDER_CERT_URL",
    "client_x509_cert_url": "GOOGLE_CLIENT_CERT_URL",
    "universe_domain": "GOOGLE_UNIVERSE_DOMAIN",
}


def service_account_info_from_env() -> Optional[Dict[str, str]]:
    """
    Read service account credentials from the environment.

    Either GOOGLE_SERVICE_ACCOUNT_JSON holds the whole key file, or the
    individual GOOGLE_* variables are set (private key with escaped newlines).
    Returns None when neither is configured.
    """
    raw = os.getenv("GOOGLE_SERVICE_ACCOUNT_JSON", "").strip()
    if raw:
        return json.loads(raw)

    if not os.getenv("GOOGLE_PRIVATE_KEY") or not os.getenv("GOOGLE_CLIENT_EMAIL"):
        return None

    info = {}
    for field_name, env_name in _SPLIT_CREDENTIAL_ENV.items():
        value = os.getenv(env_name)
        if value:
            info[field_name] = value
    info["private_key"] = info["private_key"].replace("\\n", "\n")
    info.setdefault("type", "service_account")
    info.setdefault("token_uri", "https://oauth2.googleapis.com/token")
    return info


def _children_query(parent_id: str, kind: ChildKind) -> str:
    parent = parent_id.replace("\\", "\\\\").replace("'", "\\'")
    op = "=" if kind == ChildKind.FOLDER else "!="
    return f"'{parent}' in parents and mimeType{op}'{FOLDER_MIME_TYPE}' and trashed=false"


class GoogleDriveClient(FolderListingProvider, ContentFetchProvider):
    def __init__(
        self,
        credentials: Any,
        base_url: str = DRIVE_API_URL,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def from_service_account_info(cls, info: Dict[str, str], **kwargs: Any) -> "GoogleDriveClient":
        credentials = service_account.Credentials.from_service_account_info(info, scopes=DRIVE_SCOPES)
        return cls(credentials, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _auth_headers(self) -> Dict[str, str]:
        async with self._refresh_lock:
            if not self.credentials.valid:
                # google-auth refreshes synchronously over requests
                await asyncio.to_thread(self.credentials.refresh, GoogleAuthRequest())
        return {"Authorization": f"Bearer {self.credentials.token}"}

    # -- Listing --

    async def list_files(self, parent_id: str, kind: ChildKind) -> List[Dict[str, Any]]:
        fields = "files(id, name)" if kind == ChildKind.FOLDER else "files(id, name, mimeType)"
        params: Dict[str, Any] = {
            "q": _children_query(parent_id, kind),
            "fields": f"nextPageToken, {fields}",
            "pageSize": 1000,
        }
        files: List[Dict[str, Any]] = []
        try:
            headers = await self._auth_headers()
            while True:
                response = await self._client.get(f"{self.base_url}/files", params=params, headers=headers)
                response.raise_for_status()
                data = response.json()
                files.extend(data.get("files") or [])
                token = data.get("nextPageToken")
                if not token:
                    break
                params["pageToken"] = token
            logger.debug("Listed %d %s children of %s", len(files), kind.value, parent_id)
        except httpx.HTTPStatusError as e:
            raise ListingError(
                f"Drive listing failed for {parent_id}: HTTP {e.response.status_code}",
                payload={"parent_id": parent_id, "kind": kind.value},
            ) from e
        except (httpx.HTTPError, GoogleAuthError, ValueError) as e:
            raise ListingError(f"Drive listing failed for {parent_id}: {e}", payload={"parent_id": parent_id}) from e
        return files

    # -- Content --

    async def get_metadata(self, file_id: str) -> Dict[str, Any]:
        try:
            headers = await self._auth_headers()
            response = await self._client.get(
                f"{self.base_url}/files/{file_id}",
                params={"fields": "mimeType, name"},
                headers=headers,
            )
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, GoogleAuthError, ValueError) as e:
            raise ContentFetchError(f"Drive metadata fetch failed for {file_id}: {e}", payload={"file_id": file_id}) from e

    async def open_content(self, file_id: str) -> ContentStream:
        try:
            headers = await self._auth_headers()
            request = self._client.build_request(
                "GET", f"{self.base_url}/files/{file_id}", params={"alt": "media"}, headers=headers
            )
            response = await self._client.send(request, stream=True)
        except (httpx.HTTPError, GoogleAuthError) as e:
            raise ContentFetchError(f"Drive download failed for {file_id}: {e}", payload={"file_id": file_id}) from e

        if response.is_error:
            await response.aclose()
            raise ContentFetchError(
                f"Drive download failed for {file_id}: HTTP {response.status_code}",
                payload={"file_id": file_id, "status_code": response.status_code},
            )

        async def chunks() -> AsyncIterator[bytes]:
            try:
                async for chunk in response.aiter_bytes():
                    yield chunk
            except httpx.HTTPError as e:
                raise ContentFetchError(f"Drive download interrupted for {file_id}: {e}") from e
            finally:
                await response.aclose()

        length = response.headers.get("content-length")
        return ContentStream(
            mime_type=response.headers.get("content-type", "application/octet-stream"),
            chunks=chunks(),
            size=int(length) if length else None,
            close=response.aclose,
        )
