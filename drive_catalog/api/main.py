"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import drive_catalog.api.endpoints.catalog as catalog_endpoints
from drive_catalog.catalog import AssetMirror, CatalogAssembler, CatalogService, ImageProxy, RemoteTreeLister
from drive_catalog.integrations.clients.real_http.google_drive import GoogleDriveClient, service_account_info_from_env
from drive_catalog.utils.catalog_config_loader import load_catalog_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Load catalog configuration once per process
catalog_cfg = load_catalog_config()
root_folder_id = os.getenv("ROOT_FOLDER_ID") or catalog_cfg.catalog.root_folder_id

# ============================================================================
# DEPENDENCY INJECTION
# ============================================================================

# Use real Redis / Drive / Cloudinary when configured, else in-memory stubs
if os.getenv("REDIS_URL"):
    from drive_catalog.database.redis_real import RedisCache

    cache = RedisCache(url=os.environ["REDIS_URL"])
else:
    from drive_catalog.database.redis import RedisCache

    cache = RedisCache()

drive_info = service_account_info_from_env()
if drive_info:
    drive = GoogleDriveClient.from_service_account_info(drive_info, timeout_seconds=catalog_cfg.http.timeout_seconds)
else:
    from drive_catalog.integrations.clients.mocks.drive import InMemoryDrive

    logger.warning("Google Drive credentials not configured; using in-memory Drive mock")
    drive = InMemoryDrive(root_id=root_folder_id)

if os.getenv("CLOUDINARY_CLOUD_NAME") and os.getenv("CLOUDINARY_API_KEY") and os.getenv("CLOUDINARY_API_SECRET"):
    from drive_catalog.integrations.clients.real_http.cloudinary import CloudinaryClient

    asset_sink = CloudinaryClient(
        resource_type=catalog_cfg.cdn.resource_type,
        timeout_seconds=catalog_cfg.http.upload_timeout_seconds,
    )
else:
    from drive_catalog.integrations.clients.mocks.asset_sink import InMemoryAssetSink

    logger.warning("Cloudinary credentials not configured; using in-memory CDN mock")
    asset_sink = InMemoryAssetSink()

asset_mirror = AssetMirror(cache, drive, asset_sink, catalog_cfg.cache, catalog_cfg.cdn)
assembler = CatalogAssembler(RemoteTreeLister(drive), asset_mirror, catalog_cfg.catalog)
catalog_service = CatalogService(cache, assembler, root_folder_id, catalog_cfg.cache)

catalog_endpoints.catalog_service = catalog_service
catalog_endpoints.image_proxy = ImageProxy(cache, drive, catalog_cfg.cache)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    for client in (drive, asset_sink, cache):
        if hasattr(client, "aclose"):
            await client.aclose()


# Initialize FastAPI app
app = FastAPI(
    title="Drive Catalog API",
    description="Product catalog assembled from Google Drive folders with CDN-mirrored images",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_endpoints.router, prefix="/api", tags=["Catalog"])


@app.get("/", tags=["Health"])
async def root():
    """Health check"""
    return {"service": "Drive Catalog API", "status": "healthy", "version": "1.0.0", "timestamp": datetime.now().isoformat()}


@app.get("/health", tags=["Health"])
async def health_check():
    """Detailed health check (cache backend)."""
    return {"status": "healthy", "cache": {"redis": await cache.ping()}, "timestamp": datetime.now().isoformat()}


def main():
    port = int(os.getenv("PORT", "5000"))
    logger.info("Backend running on http://localhost:%d", port)
    uvicorn.run("drive_catalog.api.main:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
