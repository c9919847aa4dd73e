#!/usr/bin/env python3
"""
Unit tests for ThumbnailCacheService.
"""

import asyncio

import pytest

from goes_browser.enums import RenderJobPriority
from goes_browser.exceptions import (
    GenerationFailedError,
    InvalidPathError,
    SourceNotFoundError,
)
from goes_browser.services.thumbnail_cache_service import ThumbnailCacheService
from goes_browser.utils import path_codec
from goes_browser.workers.thumbnail_worker import ThumbnailWorker
from tests.fakes import FakeRenderPool

IMAGE_PATH = "GOES16/FD/GEOCOLOR/2024001.jpg"


@pytest.mark.unit
@pytest.mark.thumbnail
class TestThumbnailCacheService:
    """Test suite for the read-through thumbnail cache."""

    @pytest.fixture
    def pool(self):
        return FakeRenderPool(size=2, delay=0.01, fail_sources={"2024002.png"})

    @pytest.fixture
    async def worker(self, pool):
        worker = ThumbnailWorker(render_pool=pool, dispatch_rate_limit=100)
        await worker.start()
        yield worker
        await worker.stop()

    @pytest.fixture
    def service(self, source_tree, cache_dir, worker):
        return ThumbnailCacheService(source_tree, cache_dir, worker)

    def test_cache_path_for(self, service, cache_dir):
        """Test cache entries are named by the encoded relative path."""
        assert service.cache_path_for(IMAGE_PATH) == cache_dir / path_codec.cache_filename(IMAGE_PATH)

    def test_cache_path_uses_normalized_path(self, service):
        """Test equivalent spellings of a path share one cache entry."""
        assert service.cache_path_for("GOES16//FD/./GEOCOLOR/2024001.jpg") == service.cache_path_for(IMAGE_PATH)

    @pytest.mark.asyncio
    async def test_miss_renders_then_hit_does_not(self, service, pool):
        """Test a miss renders once and later requests are pure cache hits."""
        assert service.is_cached(IMAGE_PATH) is False

        first = await service.get(IMAGE_PATH)
        second = await service.get(IMAGE_PATH)

        assert first == second
        assert first.is_file()
        assert service.is_cached(IMAGE_PATH) is True
        assert pool.render_count == 1
        assert pool.jobs[0].priority is RenderJobPriority.INTERACTIVE

    @pytest.mark.asyncio
    async def test_existing_entry_never_enqueues(self, service, pool, worker):
        """Test a pre-existing cache entry is returned without any job."""
        entry = service.cache_path_for(IMAGE_PATH)
        entry.write_bytes(b"cached")

        assert await service.get(IMAGE_PATH) == entry
        assert pool.render_count == 0
        assert worker.get_statistics().dispatched_jobs_total == 0

    @pytest.mark.asyncio
    async def test_concurrent_misses_render_once(self, service, pool):
        """Test many simultaneous requests for one image cause one render."""
        results = await asyncio.gather(*(service.get(IMAGE_PATH) for _ in range(10)))

        assert len(set(results)) == 1
        assert pool.render_count == 1

    @pytest.mark.asyncio
    async def test_missing_source_fails_fast(self, service, pool):
        """Test a missing source raises SourceNotFoundError without a job."""
        with pytest.raises(SourceNotFoundError):
            await service.get("GOES16/FD/GEOCOLOR/missing.jpg")
        assert pool.render_count == 0

    @pytest.mark.asyncio
    async def test_directory_is_not_a_source(self, service, pool):
        """Test asking for a directory's thumbnail is SourceNotFound."""
        with pytest.raises(SourceNotFoundError):
            await service.get("GOES16/FD")
        assert pool.render_count == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["", "../etc/passwd", "/etc/passwd", "GOES16/../../x.jpg"])
    async def test_invalid_paths_rejected(self, service, pool, path):
        """Test traversal and empty paths raise InvalidPathError."""
        with pytest.raises(InvalidPathError):
            await service.get(path)
        assert pool.render_count == 0

    @pytest.mark.asyncio
    async def test_generation_failure(self, service, cache_dir):
        """Test a failed render raises GenerationFailedError and caches nothing."""
        with pytest.raises(GenerationFailedError) as exc_info:
            await service.get("GOES16/FD/GEOCOLOR/2024002.png")

        assert "cannot identify" in str(exc_info.value)
        assert service.is_cached("GOES16/FD/GEOCOLOR/2024002.png") is False

    @pytest.mark.asyncio
    async def test_request_background(self, service, pool, worker):
        """Test background requests queue background jobs and skip cached images."""
        handle = await service.request_background(IMAGE_PATH)
        assert handle is not None
        assert handle.job.priority is RenderJobPriority.BACKGROUND

        result = await worker.await_completion(handle)
        assert result.success is True

        assert await service.request_background(IMAGE_PATH) is None
        assert pool.render_count == 1

    @pytest.mark.asyncio
    async def test_interactive_request_joins_background_job(self, source_tree, cache_dir):
        """Test a thumbnail request for a queued background job shares its render."""
        pool = FakeRenderPool(size=1)
        worker = ThumbnailWorker(render_pool=pool, dispatch_rate_limit=100)
        service = ThumbnailCacheService(source_tree, cache_dir, worker)

        background = await service.request_background(IMAGE_PATH)
        await worker.start()
        try:
            path = await service.get(IMAGE_PATH)
        finally:
            await worker.stop()

        assert background.done()
        assert path.is_file()
        assert pool.render_count == 1

    @pytest.mark.asyncio
    async def test_path_too_long_for_cache_entry(self, service, pool, source_tree, make_image):
        """Test a source whose cache name would exceed NAME_MAX is an invalid path."""
        long_path = "a" * 100 + "/" + "b" * 100 + "/" + "c" * 100 + "/img.jpg"
        make_image(source_tree / long_path)

        with pytest.raises(InvalidPathError):
            await service.get(long_path)
        with pytest.raises(InvalidPathError):
            await service.request_background(long_path)
        assert pool.render_count == 0
