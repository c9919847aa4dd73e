# goes_browser/services/reconciliation_service.py
"""
Reconciliation Service - heal gaps between the source tree and the cache.

A scan diffs the set of source images ("want") against the set of decoded
cache entry names ("have") and queues a background render for every source
image without a preview. It only reads the source tree and never deletes
cache entries; stale entries for removed sources are left in place.
"""

import asyncio
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import AbstractSet, List, Set, Tuple, Union

from ..constants import THUMBNAIL_FILE_EXTENSION
from ..enums import LogEmoji, LoggerName, LogSource, RenderJobPriority
from ..exceptions import (
    DirectoryUnavailableError,
    InvalidPathError,
    MalformedKeyError,
)
from ..models.reconciliation_model import ReconciliationStatus
from ..utils import path_codec
from .directory_indexer import DirectoryIndexer
from .logger import get_service_logger
from .thumbnail_cache_service import ThumbnailCacheService

logger = get_service_logger(LoggerName.RECONCILIATION_SERVICE, LogSource.SCHEDULER)


class ReconciliationService:
    """Runs reconciliation scans and exposes their progress."""

    def __init__(
        self,
        directory_indexer: DirectoryIndexer,
        thumbnail_cache_service: ThumbnailCacheService,
        cache_directory: Union[str, Path],
        image_extensions: AbstractSet[str],
    ):
        self.directory_indexer = directory_indexer
        self.thumbnail_cache_service = thumbnail_cache_service
        self.cache_directory = Path(cache_directory)
        self.image_extensions = image_extensions
        self._status = ReconciliationStatus()

    @property
    def status(self) -> ReconciliationStatus:
        """Snapshot of the running or most recent scan."""
        return self._status.model_copy()

    @property
    def is_active(self) -> bool:
        return self._status.active

    def read_cached_paths(self) -> Tuple[Set[str], int]:
        """
        Decode every cache entry name back to its source relative path.

        Only finished entries (`*.jpg`) count; in-progress temp files are
        ignored. Names that do not decode are logged and skipped.

        Returns:
            (set of relative paths with a cache entry, number of skipped names)

        Raises:
            DirectoryUnavailableError: If the cache directory cannot be read
        """
        cached: Set[str] = set()
        skipped = 0
        try:
            with os.scandir(self.cache_directory) as it:
                names = [entry.name for entry in it if entry.is_file()]
        except FileNotFoundError:
            return cached, skipped
        except OSError as e:
            raise DirectoryUnavailableError(
                str(self.cache_directory), e.strerror
            ) from e

        for name in names:
            if not name.endswith(THUMBNAIL_FILE_EXTENSION):
                continue
            try:
                cached.add(path_codec.relative_path_from_cache_filename(name))
            except MalformedKeyError as e:
                skipped += 1
                logger.warning(
                    f"Skipping unrecognised cache entry {name!r}: {e.reason}",
                    extra_context={"cache_entry": name},
                )
        return cached, skipped

    def list_source_files(self) -> List[str]:
        """Every source image below the root, depth-first."""
        return list(self.directory_indexer.walk_files("", self.image_extensions))

    async def scan(self) -> ReconciliationStatus:
        """
        Queue background renders for every source image missing a preview.

        A call made while a scan is running does not start a second scan; it
        returns the running scan's status. An unavailable source root or
        cache directory is logged and recorded in `last_error`, never raised.
        Source paths too long for a cache entry name are logged and skipped.

        Returns:
            Status of the finished (or already running) scan
        """
        if self._status.active:
            logger.info(
                "Reconciliation already in progress, not starting another",
                emoji=LogEmoji.PENDING,
            )
            return self.status

        status = ReconciliationStatus(
            active=True,
            started_at=datetime.now(timezone.utc),
            scans_completed=self._status.scans_completed,
        )
        self._status = status

        logger.info("Starting thumbnail reconciliation scan", emoji=LogEmoji.SEARCH)

        try:
            cached_paths, skipped = await asyncio.to_thread(self.read_cached_paths)
            status.cached_entries = len(cached_paths)
            status.skipped_keys = skipped

            source_files = await asyncio.to_thread(self.list_source_files)
            status.source_files = len(source_files)

            missing = [path for path in source_files if path not in cached_paths]
            status.total = len(missing)

            for relative_path in missing:
                try:
                    handle = await self.thumbnail_cache_service.enqueue_render(
                        relative_path, RenderJobPriority.BACKGROUND
                    )
                except InvalidPathError as e:
                    status.skipped_sources += 1
                    logger.warning(
                        f"Skipping {relative_path}: {e.reason}",
                        extra_context={"relative_path": relative_path},
                    )
                    continue
                status.processed += 1
                if not handle.deduplicated:
                    status.enqueued += 1

            logger.info(
                f"Reconciliation complete: {status.total} of {status.source_files} "
                f"source images missing a thumbnail, {status.enqueued} jobs queued",
                emoji=LogEmoji.SUCCESS,
                extra_context={
                    "source_files": status.source_files,
                    "cached_entries": status.cached_entries,
                    "missing": status.total,
                    "enqueued": status.enqueued,
                    "skipped_keys": status.skipped_keys,
                    "skipped_sources": status.skipped_sources,
                },
            )

        except DirectoryUnavailableError as e:
            status.last_error = str(e)
            logger.error(
                "Reconciliation aborted: directory unavailable",
                exception=e,
                error_context={"path": e.path},
            )

        finally:
            status.active = False
            status.finished_at = datetime.now(timezone.utc)
            status.scans_completed += 1

        return self.status
