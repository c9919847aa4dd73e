#!/usr/bin/env python3
"""
Integration tests for RenderPool: real worker processes, real images.
"""

import asyncio

import pytest
from PIL import Image

from goes_browser.constants import WORKER_CRASH_ERROR
from goes_browser.models.render_job_model import RenderJob
from goes_browser.utils import path_codec
from goes_browser.workers.render_pool import RenderPool
from tests.fakes import crash_on_marker_render, slow_or_crash_render


def make_job(source, cache_dir) -> RenderJob:
    return RenderJob(
        source_path=str(source),
        destination_path=str(cache_dir / path_codec.cache_filename(source.name)),
    )


@pytest.mark.integration
@pytest.mark.worker
class TestRenderPool:
    """Test suite for process-isolated rendering."""

    @pytest.fixture
    def pool(self):
        pool = RenderPool(max_workers=2, width=64)
        pool.start()
        yield pool
        pool.shutdown(wait=True)

    @pytest.mark.asyncio
    async def test_renders_in_worker_process(self, pool, source_root, cache_dir, make_image):
        """Test a valid image is rendered to a JPEG of the configured width."""
        source = make_image(source_root / "valid.png", size=(256, 128), image_format="PNG")

        result = await pool.render(make_job(source, cache_dir))

        assert result.success is True
        assert result.thumbnail_size == (64, 32)
        with Image.open(result.destination_path) as img:
            assert img.format == "JPEG"
            assert img.size == (64, 32)

    @pytest.mark.asyncio
    async def test_corrupt_image_fails_without_breaking_pool(
        self, pool, source_root, cache_dir, make_image
    ):
        """Test a corrupt image fails alone and the pool keeps working."""
        corrupt = source_root / "corrupt.jpg"
        corrupt.write_bytes(b"\xff\xd8 definitely not a jpeg")
        valid = make_image(source_root / "valid.jpg")

        failed = await pool.render(make_job(corrupt, cache_dir))
        succeeded = await pool.render(make_job(valid, cache_dir))

        assert failed.success is False
        assert "Image processing failed" in failed.error
        assert succeeded.success is True
        assert pool.crash_count == 0
        assert [p.name for p in cache_dir.iterdir()] == [
            path_codec.cache_filename("valid.jpg")
        ]

    @pytest.mark.asyncio
    async def test_worker_crash_is_isolated(self, source_root, cache_dir, make_image):
        """Test a dying worker process fails only its job and the pool recovers."""
        pool = RenderPool(max_workers=1, width=32, render_fn=crash_on_marker_render)
        pool.start()
        try:
            crashing = make_image(source_root / "crash.jpg")
            valid = make_image(source_root / "after.jpg")

            crashed = await pool.render(make_job(crashing, cache_dir))
            recovered = await pool.render(make_job(valid, cache_dir))
        finally:
            pool.shutdown(wait=True)

        assert crashed.success is False
        assert crashed.error == WORKER_CRASH_ERROR
        assert recovered.success is True
        assert pool.crash_count == 1

    @pytest.mark.asyncio
    async def test_crash_does_not_fail_concurrent_renders(
        self, source_root, cache_dir, make_image
    ):
        """Test renders sharing the executor with a crashing one still succeed."""
        pool = RenderPool(max_workers=2, width=32, render_fn=slow_or_crash_render)
        pool.start()
        try:
            crashing = make_image(source_root / "crash.jpg")
            valid = make_image(source_root / "good.jpg")

            crashed, rendered = await asyncio.gather(
                pool.render(make_job(crashing, cache_dir)),
                pool.render(make_job(valid, cache_dir)),
            )
        finally:
            pool.shutdown(wait=True)

        assert crashed.success is False
        assert crashed.error == WORKER_CRASH_ERROR
        assert rendered.success is True
        assert rendered.thumbnail_size == (32, 24)
        assert pool.crash_count == 1

    @pytest.mark.asyncio
    async def test_render_after_shutdown(self, source_root, cache_dir, make_image):
        """Test a stopped pool reports failures instead of raising."""
        pool = RenderPool(max_workers=1)
        source = make_image(source_root / "late.jpg")

        result = await pool.render(make_job(source, cache_dir))

        assert result.success is False
        assert pool.running is False
