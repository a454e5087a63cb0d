"""
Cloudinary HTTP Client.

Uploads image streams through the signed Upload API. The request body is a
multipart form assembled on the fly, so file bytes flow from the source
stream to Cloudinary chunk by chunk.

Uploading with the same public_id overwrites the existing object, so
repeated mirroring of one Drive file never creates duplicates.
"""

from __future__ import annotations

import hashlib
import logging
import os
import time
import uuid
from typing import Any, AsyncIterator, Dict, Optional

import httpx

from drive_catalog.integrations.contracts.errors import IntegrationError, UploadError
from drive_catalog.integrations.contracts.interfaces import AssetSink, ContentStream

logger = logging.getLogger(__name__)

CLOUDINARY_API_URL = "https://api.cloudinary.com/v1_1"


def sign_params(params: Dict[str, Any], api_secret: str) -> str:
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    """Decoded JSON object body. A non-JSON body (a gateway error page) is kept as truncated text."""
    try:
        data = response.json() if response.content else {}
    except ValueError:
        return {"body": response.text[:500]}
    return data if isinstance(data, dict) else {}


class CloudinaryClient(AssetSink):
    def __init__(
        self,
        cloud_name: Optional[str] = None,
        api_key: Optional[str] = None,
        api_secret: Optional[str] = None,
        base_url: str = CLOUDINARY_API_URL,
        resource_type: str = "image",
        timeout_seconds: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.cloud_name = cloud_name or os.getenv("CLOUDINARY_CLOUD_NAME", "")
        self.api_key = api_key or os.getenv("CLOUDINARY_API_KEY", "")
        self.api_secret = api_secret or os.getenv("CLOUDINARY_API_SECRET", "")
        self.base_url = base_url.rstrip("/")
        self.resource_type = resource_type
        self._client = http_client or httpx.AsyncClient(timeout=timeout_seconds)

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def upload_url(self) -> str:
        return f"{self.base_url}/{self.cloud_name}/{self.resource_type}/upload"

    def _signed_fields(self, folder: str, public_id: str) -> Dict[str, str]:
        params = {
            "folder": folder,
            "overwrite": "true",
            "public_id": public_id,
            "timestamp": str(int(time.time())),
        }
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return params

    async def _multipart_body(
        self, boundary: str, fields: Dict[str, str], stream: ContentStream, filename: str
    ) -> AsyncIterator[bytes]:
        for name, value in fields.items():
            yield (
                f"--{boundary}\r\n"
                f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
                f"{value}\r\n"
            ).encode("utf-8")
        yield (
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="file"; filename="{filename}"\r\n'
            f"Content-Type: {stream.mime_type}\r\n\r\n"
        ).encode("utf-8")
        async for chunk in stream.chunks:
            yield chunk
        yield f"\r\n--{boundary}--\r\n".encode("utf-8")

    async def upload(self, stream: ContentStream, *, folder: str, public_id: str) -> str:
        if not self.cloud_name or not self.api_key or not self.api_secret:
            raise ValueError("CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET must be configured.")

        boundary = uuid.uuid4().hex
        headers = {"Content-Type": f"multipart/form-data; boundary={boundary}"}
        body = self._multipart_body(boundary, self._signed_fields(folder, public_id), stream, public_id)

        try:
            response = await self._client.post(self.upload_url, content=body, headers=headers)
        except IntegrationError:
            raise
        except httpx.HTTPError as e:
            raise UploadError(f"Cloudinary upload failed for {public_id}: {e}", payload={"public_id": public_id}) from e

        data = _json_body(response)
        if response.is_error:
            message = (data.get("error") or {}).get("message")
            raise UploadError(
                f"Cloudinary upload failed for {public_id}: HTTP {response.status_code} {message or ''}".strip(),
                payload=data,
            )

        secure_url = data.get("secure_url")
        if not secure_url:
            raise UploadError(f"Cloudinary response for {public_id} has no secure_url", payload=data)
        logger.debug("Uploaded %s to %s", public_id, secure_url)
        return secure_url
