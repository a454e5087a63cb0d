import asyncio

import pytest

from drive_catalog.catalog import AssetMirror
from drive_catalog.database.redis import RedisCache
from drive_catalog.integrations.clients.mocks.asset_sink import InMemoryAssetSink
from drive_catalog.integrations.contracts.errors import CacheBackendError, ContentFetchError, UploadError
from drive_catalog.integrations.contracts.interfaces import KeyValueCache
from drive_catalog.utils.catalog_config_loader import CacheConfig


class BrokenCache(KeyValueCache):
    def __init__(self):
        self.sets = 0

    async def get(self, key):
        raise CacheBackendError("connection refused")

    async def set(self, key, value, ttl):
        self.sets += 1
        raise CacheBackendError("connection refused")

    async def ping(self):
        return False


class GatedSink(InMemoryAssetSink):
    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def upload(self, stream, *, folder, public_id):
        await self.gate.wait()
        return await super().upload(stream, folder=folder, public_id=public_id)


@pytest.mark.asyncio
async def test_resolve_uploads_once_and_caches_url(mirror, silk_tree, sink, cache):
    url1 = await mirror.resolve_asset_url("a", "a.jpg")
    url2 = await mirror.resolve_asset_url("a", "a.jpg")

    assert url1 == url2
    assert url1.endswith("/sarees/a")
    assert sink.uploads == ["a"]
    assert silk_tree.content_calls == ["a"]
    assert await cache.get("image_url:a") == url1


@pytest.mark.asyncio
async def test_cached_url_skips_all_upstream_calls(mirror, drive, sink, cache):
    await cache.set("image_url:zzz", "https://cdn.example/zzz.jpg", 86400)

    url = await mirror.resolve_asset_url("zzz", "zzz.jpg")

    assert url == "https://cdn.example/zzz.jpg"
    assert drive.content_calls == []
    assert sink.uploads == []


@pytest.mark.asyncio
async def test_upload_streams_file_bytes_under_stable_public_id(mirror, silk_tree, sink):
    await mirror.resolve_asset_url("b", "b.png")
    assert sink.objects == {"sarees/b": b"bbbb"}


@pytest.mark.asyncio
async def test_upload_failure_is_not_cached(mirror, silk_tree, sink, cache):
    sink.failing_ids.add("a")
    with pytest.raises(UploadError):
        await mirror.resolve_asset_url("a", "a.jpg")
    assert await cache.get("image_url:a") is None

    sink.failing_ids.clear()
    url = await mirror.resolve_asset_url("a", "a.jpg")
    assert sink.uploads == ["a", "a"]
    assert await cache.get("image_url:a") == url


@pytest.mark.asyncio
async def test_fetch_failure_propagates(mirror, drive, sink):
    with pytest.raises(ContentFetchError):
        await mirror.resolve_asset_url("missing", "missing.jpg")
    assert sink.uploads == []


@pytest.mark.asyncio
async def test_url_expires_after_24_hours(mirror, silk_tree, sink, clock):
    await mirror.resolve_asset_url("a", "a.jpg")
    clock.advance(86399)
    await mirror.resolve_asset_url("a", "a.jpg")
    assert sink.uploads == ["a"]

    clock.advance(1)
    await mirror.resolve_asset_url("a", "a.jpg")
    assert sink.uploads == ["a", "a"]


@pytest.mark.asyncio
async def test_concurrent_resolutions_share_one_upload(cache, silk_tree):
    sink = GatedSink()
    mirror = AssetMirror(cache, silk_tree, sink)

    async def release():
        for _ in range(5):
            await asyncio.sleep(0)
        sink.gate.set()

    url1, url2, _ = await asyncio.gather(
        mirror.resolve_asset_url("a", "a.jpg"),
        mirror.resolve_asset_url("a", "a.jpg"),
        release(),
    )

    assert url1 == url2
    assert sink.uploads == ["a"]
    assert silk_tree.content_calls == ["a"]


@pytest.mark.asyncio
async def test_broken_cache_read_is_a_miss_and_write_is_ignored(silk_tree, sink):
    broken = BrokenCache()
    mirror = AssetMirror(broken, silk_tree, sink)

    url = await mirror.resolve_asset_url("a", "a.jpg")

    assert url.endswith("/sarees/a")
    assert broken.sets == 1


@pytest.mark.asyncio
async def test_broken_cache_read_fails_when_fail_closed(silk_tree, sink):
    mirror = AssetMirror(BrokenCache(), silk_tree, sink, cache_cfg=CacheConfig(fail_open=False))
    with pytest.raises(CacheBackendError):
        await mirror.resolve_asset_url("a", "a.jpg")
    assert sink.uploads == []


@pytest.mark.asyncio
async def test_drive_stream_closed_after_success_and_failure(mirror, silk_tree, sink):
    await mirror.resolve_asset_url("a", "a.jpg")
    sink.failing_ids.add("b")
    with pytest.raises(UploadError):
        await mirror.resolve_asset_url("b", "b.png")

    assert silk_tree.closed_streams == ["a", "b"]


class StaleReadCache(RedisCache):
    """Answers the next ``stale_reads`` lookups with a miss, like a read that raced a write."""

    def __init__(self):
        super().__init__()
        self.stale_reads = 0

    async def get(self, key):
        if self.stale_reads:
            self.stale_reads -= 1
            return None
        return await super().get(key)


@pytest.mark.asyncio
async def test_stale_miss_rechecks_cache_before_uploading(silk_tree, sink):
    cache = StaleReadCache()
    mirror = AssetMirror(cache, silk_tree, sink)
    url = await mirror.resolve_asset_url("a", "a.jpg")

    cache.stale_reads = 1
    assert await mirror.resolve_asset_url("a", "a.jpg") == url
    assert sink.uploads == ["a"]
    assert silk_tree.content_calls == ["a"]
