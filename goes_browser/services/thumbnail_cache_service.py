# goes_browser/services/thumbnail_cache_service.py
"""
Thumbnail Cache Service - the read-through preview cache.

A cache entry is `<cache_dir>/<encoded relative path>.jpg`; its existence is
the only record that a preview is ready. Misses are turned into render jobs
on the ThumbnailWorker, interactive for client requests and background for
the reconciliation scan.
"""

import asyncio
from pathlib import Path
from typing import Optional, Tuple, Union

from ..enums import LogEmoji, LoggerName, LogSource, RenderJobPriority
from ..exceptions import GenerationFailedError, InvalidPathError, SourceNotFoundError
from ..models.render_job_model import RenderJob
from ..utils import path_codec
from ..utils.file_helpers import normalize_relative_path, resolve_under_root
from ..workers.thumbnail_worker import JobHandle, ThumbnailWorker
from .logger import get_service_logger

logger = get_service_logger(LoggerName.THUMBNAIL_CACHE_SERVICE, LogSource.PIPELINE)


class ThumbnailCacheService:
    """
    Resolves previews for source images, rendering missing ones on demand.
    """

    def __init__(
        self,
        source_root: Union[str, Path],
        cache_directory: Union[str, Path],
        thumbnail_worker: ThumbnailWorker,
    ):
        """
        Args:
            source_root: Root of the source image tree
            cache_directory: Flat directory holding the cache entries
            thumbnail_worker: Queue that performs the renders
        """
        self.source_root = Path(source_root)
        self.cache_directory = Path(cache_directory)
        self.thumbnail_worker = thumbnail_worker

    def cache_path_for(self, relative_path: str) -> Path:
        """
        Cache entry path for a source path (whether or not it exists).

        Raises:
            InvalidPathError: If the path is absolute, contains '..' or is empty
        """
        normalized = self._normalize(relative_path)
        return self.cache_directory / path_codec.cache_filename(normalized)

    def is_cached(self, relative_path: str) -> bool:
        return self.cache_path_for(relative_path).is_file()

    async def get(self, relative_path: str) -> Path:
        """
        Return the preview for a source image, rendering it first on a miss.

        A hit never creates a job. On a miss the source must exist; the
        caller then waits on an interactive job (shared with any job already
        queued or running for the same destination).

        Args:
            relative_path: Source image path relative to the source root

        Returns:
            Path of the cache entry

        Raises:
            InvalidPathError: If the path escapes the source root
            SourceNotFoundError: If the source image does not exist
            GenerationFailedError: If the render fails
        """
        normalized = self._normalize(relative_path)
        cache_path = self.cache_directory / path_codec.cache_filename(normalized)

        if cache_path.is_file():
            logger.debug(f"Cache hit: {normalized}", emoji=LogEmoji.CACHE)
            return cache_path

        source_path, source_exists = await asyncio.to_thread(
            self._resolve_source, normalized
        )
        if not source_exists:
            raise SourceNotFoundError(normalized)

        handle = await self.thumbnail_worker.enqueue(
            RenderJob(
                source_path=str(source_path),
                destination_path=str(cache_path),
                priority=RenderJobPriority.INTERACTIVE,
            )
        )
        result = await self.thumbnail_worker.await_completion(handle)

        if not result.success:
            raise GenerationFailedError(normalized, result.error)

        return cache_path

    async def request_background(self, relative_path: str) -> Optional[JobHandle]:
        """
        Queue a background render for a source image unless it is cached.

        Fire-and-forget: the returned handle may be ignored.

        Returns:
            Handle of the queued (or already existing) job, None on a cache hit

        Raises:
            InvalidPathError: If the path escapes the source root
        """
        normalized = self._normalize(relative_path)
        if self.is_cached(normalized):
            return None

        await asyncio.to_thread(resolve_under_root, self.source_root, normalized)
        return await self.enqueue_render(normalized, RenderJobPriority.BACKGROUND)

    async def enqueue_render(
        self, relative_path: str, priority: RenderJobPriority
    ) -> JobHandle:
        """
        Queue a render for a path already known to lie under the source root.

        Used by the reconciliation scan with paths produced by the directory
        walk, so no filesystem validation happens here.
        """
        normalized = self._normalize(relative_path)
        return await self.thumbnail_worker.enqueue(
            RenderJob(
                source_path=str(self.source_root / normalized),
                destination_path=str(
                    self.cache_directory / path_codec.cache_filename(normalized)
                ),
                priority=priority,
            )
        )

    def _resolve_source(self, normalized: str) -> Tuple[Path, bool]:
        source_path = resolve_under_root(self.source_root, normalized)
        return source_path, source_path.is_file()

    @staticmethod
    def _normalize(relative_path: str) -> str:
        normalized = normalize_relative_path(relative_path)
        if not normalized:
            raise InvalidPathError(relative_path, "path is empty")
        return normalized
