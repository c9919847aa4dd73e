# goes_browser/routers/thumbnail_routers.py
"""
Thumbnail HTTP endpoints.

Role: Serve previews, generating missing ones on demand
Responsibilities: Path parameter validation, cache lookups, waiting on
                 interactive render jobs
Interactions: Uses ThumbnailCacheService; errors mapped by handle_exceptions
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import FileResponse

from ..dependencies import ThumbnailCacheServiceDep
from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import get_service_logger
from ..utils.router_helpers import handle_exceptions

logger = get_service_logger(LoggerName.API, LogSource.API)

router = APIRouter(tags=["thumbnails"])


@router.get("/thumbnail")
@handle_exceptions("fetch thumbnail")
async def get_thumbnail(
    thumbnail_cache_service: ThumbnailCacheServiceDep,
    path: Optional[str] = Query(None, description="Image path relative to the source root"),
) -> FileResponse:
    """
    Return the JPEG preview for an image.

    A cached preview is served immediately; otherwise the request waits for
    an interactive render. Concurrent requests for the same image share one
    render.
    """
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path parameter is required",
        )

    logger.debug(f"Fetching thumbnail for path: {path}", emoji=LogEmoji.THUMBNAIL)
    thumbnail_path = await thumbnail_cache_service.get(path)
    return FileResponse(thumbnail_path, media_type="image/jpeg")
