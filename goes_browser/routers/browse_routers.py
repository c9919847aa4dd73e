# goes_browser/routers/browse_routers.py
"""
Source tree browsing HTTP endpoints.

Role: Directory listing and original image download
Responsibilities: Validate client paths, list one directory level, stream
                 full-resolution originals
Interactions: Uses DirectoryIndexer for listings; path validation from
             utils/file_helpers
"""

import asyncio
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import FileResponse

from ..dependencies import DirectoryIndexerDep, SettingsDep
from ..enums import LogEmoji, LoggerName, LogSource
from ..exceptions import SourceNotFoundError
from ..models.source_entry_model import SourceEntry
from ..services.logger import get_service_logger
from ..utils.file_helpers import normalize_relative_path, resolve_under_root
from ..utils.router_helpers import handle_exceptions

logger = get_service_logger(LoggerName.API, LogSource.API)

router = APIRouter(tags=["browse"])


@router.get("/list", response_model=List[SourceEntry])
@handle_exceptions("list directory")
async def list_directory(
    directory_indexer: DirectoryIndexerDep,
    settings: SettingsDep,
    path: str = Query("", description="Directory relative to the source root"),
) -> List[SourceEntry]:
    """
    List one directory level: all subdirectories plus recognised image files.
    """
    logger.debug(f"Listing files for path: {path!r}", emoji=LogEmoji.INCOMING)
    return await asyncio.to_thread(
        directory_indexer.list_directory, path, settings.image_extension_set
    )


@router.get("/download")
@handle_exceptions("download image")
async def download_image(
    settings: SettingsDep,
    path: Optional[str] = Query(None, description="Image path relative to the source root"),
) -> FileResponse:
    """
    Download a full-resolution original as an attachment.
    """
    if not path:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Path parameter is required",
        )

    normalized = normalize_relative_path(path)
    full_path = await asyncio.to_thread(
        resolve_under_root, settings.source_path, normalized
    )
    if not await asyncio.to_thread(full_path.is_file):
        raise SourceNotFoundError(normalized)

    logger.info(f"Initiating download for path: {normalized}", emoji=LogEmoji.OUTGOING)
    return FileResponse(full_path, filename=full_path.name)
