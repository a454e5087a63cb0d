"""
Catalog configuration loader (cache TTLs, Drive tree, CDN target, HTTP).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)


class CacheConfig(BaseModel):
    catalog_key: str = "saree_catalog"
    catalog_ttl_seconds: int = Field(default=600, ge=1)
    asset_key_prefix: str = "image_url:"
    asset_url_ttl_seconds: int = Field(default=86400, ge=1)
    image_meta_key_prefix: str = "image_meta:"
    image_meta_ttl_seconds: int = Field(default=3600, ge=1)
    # Treat a failing cache read as a miss instead of an error
    fail_open: bool = True


class CatalogSettings(BaseModel):
    root_folder_id: str = "1D5KfQhDqL0gz3ymI1QWrVyzu_uwe385_"
    preview_size: int = Field(default=5, ge=0)
    default_category: str = "Default"
    default_range: str = "1-2k"
    default_price: str = "₹1500"
    max_concurrency: int = Field(default=1, ge=1, le=64)


class CDNConfig(BaseModel):
    folder: str = "sarees"
    resource_type: str = "image"


class HTTPConfig(BaseModel):
    timeout_seconds: float = Field(default=30.0, gt=0)
    upload_timeout_seconds: float = Field(default=120.0, gt=0)


class CatalogConfig(BaseModel):
    cache: CacheConfig = Field(default_factory=CacheConfig)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    cdn: CDNConfig = Field(default_factory=CDNConfig)
    http: HTTPConfig = Field(default_factory=HTTPConfig)


def load_catalog_config(config_path: Optional[Path] = None) -> CatalogConfig:
    """
    Load and validate catalog configuration from YAML file

    Args:
        config_path: Path to config file. Defaults to config/catalog_config.yml

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    if config_path is None:
        config_path = Path(__file__).parent.parent.parent / "config" / "catalog_config.yml"

    if not config_path.exists():
        raise FileNotFoundError(f"Catalog config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    try:
        cfg = CatalogConfig(**data)
        logger.info("Successfully loaded catalog config from %s", config_path)
        return cfg
    except ValidationError as e:
        logger.error("Catalog config validation failed: %s", e)
        raise
