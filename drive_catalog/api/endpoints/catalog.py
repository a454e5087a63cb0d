import logging

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from drive_catalog.catalog.image_proxy import ImageProxy
from drive_catalog.catalog.orchestrator import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter()


# Will be set by main.py after import
catalog_service: CatalogService = None
image_proxy: ImageProxy = None


@router.get("/catalog")
async def get_catalog():
    try:
        return await catalog_service.get_catalog()
    except Exception as e:
        logger.error("Error fetching catalog: %s", e.__cause__ or e)
        return PlainTextResponse("Error fetching catalog", status_code=500)


@router.get("/image/{file_id}")
async def get_image(file_id: str):
    try:
        stream = await image_proxy.open_image(file_id)
    except Exception as e:
        logger.error("Error fetching image %s: %s", file_id, e)
        return PlainTextResponse("Error fetching image", status_code=500)

    headers = {"Content-Length": str(stream.size)} if stream.size is not None else None
    return StreamingResponse(
        stream.chunks, media_type=stream.mime_type, headers=headers, background=BackgroundTask(stream.aclose)
    )
