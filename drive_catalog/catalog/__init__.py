"""
Catalog core: Drive tree listing, asset mirroring, catalog assembly and the
cache-aside service in front of it.
"""

from .assembler import CatalogAssembler
from .asset_mirror import AssetMirror
from .image_proxy import ImageProxy
from .lister import RemoteTreeLister
from .orchestrator import CatalogService
from .single_flight import SingleFlight

__all__ = [
    "AssetMirror",
    "CatalogAssembler",
    "CatalogService",
    "ImageProxy",
    "RemoteTreeLister",
    "SingleFlight",
]
