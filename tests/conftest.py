"""Pytest fixtures for the catalog core and API tests."""

import pytest

from drive_catalog.catalog import AssetMirror, CatalogAssembler, CatalogService, RemoteTreeLister
from drive_catalog.database.redis import RedisCache
from drive_catalog.integrations.clients.mocks.asset_sink import InMemoryAssetSink
from drive_catalog.integrations.clients.mocks.drive import InMemoryDrive


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    """In-memory cache driven by the fake clock."""
    return RedisCache(clock=clock)


@pytest.fixture
def drive():
    return InMemoryDrive(root_id="root")


@pytest.fixture
def sink():
    return InMemoryAssetSink()


@pytest.fixture
def silk_tree(drive):
    """Root -> Silk -> Red -> a.jpg, b.png"""
    silk = drive.add_folder("root", "Silk", folder_id="cat-silk")
    red = drive.add_folder(silk, "Red", folder_id="sub-red")
    drive.add_file(red, "a.jpg", content=b"aaaa", file_id="a")
    drive.add_file(red, "b.png", content=b"bbbb", mime_type="image/png", file_id="b")
    return drive


@pytest.fixture
def mirror(cache, drive, sink):
    return AssetMirror(cache, drive, sink)


@pytest.fixture
def assembler(drive, mirror):
    return CatalogAssembler(RemoteTreeLister(drive), mirror)


@pytest.fixture
def service(cache, assembler):
    return CatalogService(cache, assembler, root_folder_id="root")
