import re

import httpx
import pytest

from drive_catalog.integrations.clients.real_http.cloudinary import CloudinaryClient, sign_params
from drive_catalog.integrations.contracts.errors import ContentFetchError, UploadError
from drive_catalog.integrations.contracts.interfaces import ContentStream

_FIELD_RE = re.compile(rb'name="(\w+)"\r\n\r\n([^\r]*)\r\n')


def _stream(*chunks, mime_type="image/jpeg"):
    async def gen():
        for chunk in chunks:
            yield chunk

    return ContentStream(mime_type=mime_type, chunks=gen())


def _client(handler):
    return CloudinaryClient(
        cloud_name="demo",
        api_key="key-123",
        api_secret="secret",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


def test_sign_params_matches_cloudinary_scheme():
    params = {"timestamp": "1315060510", "public_id": "sample_image", "eager": "w_400,h_300,c_pad|w_260,h_200,c_crop"}
    assert sign_params(params, "abcd") == "bfd09f95f331f558cbd1320e67aa8d488770583e"


@pytest.mark.asyncio
async def test_upload_streams_signed_multipart():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"secure_url": "https://res.cloudinary.com/demo/image/upload/sarees/f1.jpg"})

    client = _client(handler)
    url = await client.upload(_stream(b"part1-", b"part2"), folder="sarees", public_id="f1")
    await client.aclose()

    assert url == "https://res.cloudinary.com/demo/image/upload/sarees/f1.jpg"
    assert seen["url"] == "https://api.cloudinary.com/v1_1/demo/image/upload"
    assert seen["content_type"].startswith("multipart/form-data; boundary=")
    assert b"part1-part2" in seen["body"]
    assert b"Content-Type: image/jpeg" in seen["body"]

    fields = {k.decode(): v.decode() for k, v in _FIELD_RE.findall(seen["body"])}
    assert fields["folder"] == "sarees"
    assert fields["public_id"] == "f1"
    assert fields["overwrite"] == "true"
    assert fields["api_key"] == "key-123"
    signed = {k: fields[k] for k in ("folder", "overwrite", "public_id", "timestamp")}
    assert fields["signature"] == sign_params(signed, "secret")


@pytest.mark.asyncio
async def test_upload_error_response_raises_upload_error():
    client = _client(lambda request: httpx.Response(400, json={"error": {"message": "Invalid image file"}}))

    with pytest.raises(UploadError) as excinfo:
        await client.upload(_stream(b"x"), folder="sarees", public_id="f1")
    assert "Invalid image file" in str(excinfo.value)


@pytest.mark.asyncio
async def test_upload_without_secure_url_raises_upload_error():
    client = _client(lambda request: httpx.Response(200, json={"public_id": "sarees/f1"}))

    with pytest.raises(UploadError):
        await client.upload(_stream(b"x"), folder="sarees", public_id="f1")


@pytest.mark.asyncio
async def test_source_failure_propagates_through_upload():
    async def broken():
        yield b"first"
        raise ContentFetchError("Drive download interrupted")

    client = _client(lambda request: httpx.Response(200, json={"secure_url": "https://never"}))

    with pytest.raises(ContentFetchError):
        await client.upload(ContentStream(mime_type="image/jpeg", chunks=broken()), folder="sarees", public_id="f1")


@pytest.mark.asyncio
async def test_missing_credentials_rejected(monkeypatch):
    for name in ("CLOUDINARY_CLOUD_NAME", "CLOUDINARY_API_KEY", "CLOUDINARY_API_SECRET"):
        monkeypatch.delenv(name, raising=False)
    client = CloudinaryClient(http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200))))

    with pytest.raises(ValueError):
        await client.upload(_stream(b"x"), folder="sarees", public_id="f1")


@pytest.mark.asyncio
async def test_gateway_error_page_raises_upload_error():
    client = _client(lambda request: httpx.Response(502, text="<html>Bad Gateway</html>"))

    with pytest.raises(UploadError) as excinfo:
        await client.upload(_stream(b"x"), folder="sarees", public_id="f1")
    assert "HTTP 502" in str(excinfo.value)
    assert "Bad Gateway" in excinfo.value.payload["body"]
