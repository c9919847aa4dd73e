#!/usr/bin/env python3
"""
Unit tests for ReconciliationService.
"""

import asyncio
import os
import threading

import pytest

from goes_browser.enums import RenderJobPriority
from goes_browser.services.directory_indexer import DirectoryIndexer
from goes_browser.services.reconciliation_service import ReconciliationService
from goes_browser.services.thumbnail_cache_service import ThumbnailCacheService
from goes_browser.utils import path_codec
from goes_browser.workers.thumbnail_worker import ThumbnailWorker
from tests.fakes import FakeRenderPool

ALL_IMAGES = {
    "GOES16/CONUS/Band02/2024001.JPG",
    "GOES16/FD/GEOCOLOR/2024001.jpg",
    "GOES16/FD/GEOCOLOR/2024002.png",
}


@pytest.mark.unit
@pytest.mark.thumbnail
class TestReconciliationService:
    """Test suite for reconciliation scans."""

    @pytest.fixture
    def pool(self):
        return FakeRenderPool(size=2)

    @pytest.fixture
    def worker(self, pool):
        # Not started: queued jobs stay observable
        return ThumbnailWorker(render_pool=pool, dispatch_rate_limit=100)

    @pytest.fixture
    def make_service(self, cache_dir, worker, image_extensions):
        def _make_service(source_root):
            cache_service = ThumbnailCacheService(source_root, cache_dir, worker)
            return ReconciliationService(
                DirectoryIndexer(source_root), cache_service, cache_dir, image_extensions
            )

        return _make_service

    @pytest.fixture
    def service(self, make_service, source_tree):
        return make_service(source_tree)

    @pytest.mark.asyncio
    async def test_scan_enqueues_every_missing_image(self, service, worker):
        """Test an empty cache gets one background job per source image."""
        status = await service.scan()

        assert status.active is False
        assert status.source_files == 3
        assert status.total == 3
        assert status.processed == 3
        assert status.enqueued == 3
        assert status.scans_completed == 1
        assert status.last_error is None

        queued = {
            path_codec.relative_path_from_cache_filename(os.path.basename(p))
            for p in worker._jobs
        }
        assert queued == ALL_IMAGES
        assert all(
            t.job.priority is RenderJobPriority.BACKGROUND for t in worker._jobs.values()
        )

    @pytest.mark.asyncio
    async def test_scan_completeness_after_processing(self, service, worker, pool, cache_dir):
        """Test every source image has a cache entry once the queue drains."""
        await service.scan()
        await worker.start()
        try:
            await _drain(worker)
        finally:
            await worker.stop()

        cached, skipped = service.read_cached_paths()
        assert cached == ALL_IMAGES
        assert skipped == 0
        assert pool.render_count == 3

    @pytest.mark.asyncio
    async def test_scan_skips_cached_images(self, service, cache_dir):
        """Test images that already have a cache entry are not queued."""
        (cache_dir / path_codec.cache_filename("GOES16/FD/GEOCOLOR/2024001.jpg")).write_bytes(b"x")

        status = await service.scan()

        assert status.cached_entries == 1
        assert status.total == 2
        assert status.enqueued == 2

    @pytest.mark.asyncio
    async def test_scan_is_non_destructive(self, service, cache_dir):
        """Test stale entries, foreign files and temp files are left alone."""
        stale = cache_dir / path_codec.cache_filename("GOES15/removed.jpg")
        foreign = cache_dir / "not a key!.jpg"
        temp = cache_dir / ".abc.jpg.0123456789abcdef.tmp"
        for path in (stale, foreign, temp):
            path.write_bytes(b"x")

        status = await service.scan()

        assert stale.exists() and foreign.exists() and temp.exists()
        assert status.skipped_keys == 1
        assert status.cached_entries == 1
        assert status.total == 3

    @pytest.mark.asyncio
    async def test_scan_deduplicates_against_queue(self, service, worker):
        """Test a second scan attaches to jobs still queued from the first."""
        await service.scan()
        status = await service.scan()

        assert status.total == 3
        assert status.processed == 3
        assert status.enqueued == 0
        assert status.scans_completed == 2
        assert len(worker._jobs) == 3

    @pytest.mark.asyncio
    async def test_unavailable_source_root_recorded(self, make_service, tmp_path):
        """Test an unmounted source root is recorded, not raised."""
        service = make_service(tmp_path / "not-mounted")

        status = await service.scan()

        assert status.active is False
        assert status.last_error is not None
        assert "unavailable" in status.last_error.lower()
        assert status.scans_completed == 1

    @pytest.mark.asyncio
    async def test_scan_skips_paths_too_long_for_cache(self, service, worker, source_tree, make_image):
        """Test sources whose cache name cannot exist are logged and skipped."""
        long_path = "a" * 100 + "/" + "b" * 100 + "/" + "c" * 100 + "/img.jpg"
        make_image(source_tree / long_path)

        status = await service.scan()

        assert status.last_error is None
        assert status.source_files == 4
        assert status.total == 4
        assert status.skipped_sources == 1
        assert status.processed == 3
        assert status.enqueued == 3
        assert len(worker._jobs) == 3

    @pytest.mark.asyncio
    async def test_unreadable_cache_directory_recorded(self, service, cache_dir, monkeypatch):
        """Test a cache directory that cannot be listed is recorded, not raised."""
        real_scandir = os.scandir

        def scandir(path="."):
            if os.fspath(path) == os.fspath(cache_dir):
                raise PermissionError(13, "Permission denied", os.fspath(path))
            return real_scandir(path)

        monkeypatch.setattr(
            "goes_browser.services.reconciliation_service.os.scandir", scandir
        )

        status = await service.scan()

        assert status.active is False
        assert status.last_error is not None
        assert "Permission denied" in status.last_error
        assert status.scans_completed == 1

    @pytest.mark.asyncio
    async def test_concurrent_scan_not_started_twice(self, service, monkeypatch):
        """Test a scan requested while one is running returns its status."""
        release = threading.Event()
        original = service.list_source_files
        calls = []

        def blocking_list():
            calls.append(1)
            release.wait(timeout=5)
            return original()

        monkeypatch.setattr(service, "list_source_files", blocking_list)

        first = asyncio.create_task(service.scan())
        for _ in range(200):
            if calls:
                break
            await asyncio.sleep(0.01)
        assert service.is_active

        second = await service.scan()
        assert second.active is True
        assert second.scans_completed == 0

        release.set()
        final = await first
        assert final.active is False
        assert final.scans_completed == 1
        assert len(calls) == 1


async def _drain(worker: ThumbnailWorker) -> None:
    handles = [t.future for t in list(worker._jobs.values())]
    await asyncio.gather(*handles)
