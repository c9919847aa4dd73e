#!/usr/bin/env python3
"""
Unit tests for the thumbnail generator (render worker body).

Runs the generator in-process; process isolation is covered by the
render pool integration tests.
"""

import pytest
from PIL import Image

from goes_browser.services.thumbnail_pipeline import (
    ThumbnailGenerator,
    calculate_thumbnail_dimensions,
    render_thumbnail,
)


@pytest.mark.unit
@pytest.mark.thumbnail
class TestThumbnailGenerator:
    """Test suite for ThumbnailGenerator."""

    def test_calculate_dimensions_preserves_aspect_ratio(self):
        """Test width is fixed and height follows the aspect ratio."""
        assert calculate_thumbnail_dimensions((1808, 1808), 200) == (200, 200)
        assert calculate_thumbnail_dimensions((5000, 3000), 200) == (200, 120)
        assert calculate_thumbnail_dimensions((100, 50), 200) == (200, 100)

    def test_calculate_dimensions_minimum_height(self):
        """Test extremely wide images keep at least one pixel of height."""
        assert calculate_thumbnail_dimensions((100000, 10), 200) == (200, 1)

    def test_generate_jpeg_thumbnail(self, tmp_path, make_image):
        """Test a JPEG source produces a 200px wide JPEG preview."""
        source = make_image(tmp_path / "src" / "a.jpg", size=(800, 600))
        output = tmp_path / "cache" / "a.jpg.jpg"

        result = render_thumbnail(str(source), str(output))

        assert result["success"] is True
        assert result["source_size"] == (800, 600)
        assert result["thumbnail_size"] == (200, 150)
        assert result["file_size"] == output.stat().st_size
        assert result["processing_time_ms"] >= 0
        with Image.open(output) as img:
            assert img.format == "JPEG"
            assert img.size == (200, 150)

    def test_small_images_are_upscaled_to_width(self, tmp_path, make_image):
        """Test sources narrower than the target are resized up."""
        source = make_image(tmp_path / "small.png", size=(50, 25), image_format="PNG")
        output = tmp_path / "small.png.jpg"

        result = ThumbnailGenerator().generate_thumbnail(str(source), str(output))

        assert result["success"] is True
        assert result["thumbnail_size"] == (200, 100)

    def test_rgba_source_is_converted(self, tmp_path, make_image):
        """Test images with alpha are converted to RGB for JPEG output."""
        source = make_image(
            tmp_path / "alpha.png", mode="RGBA", color=(10, 20, 30, 128), image_format="PNG"
        )
        output = tmp_path / "alpha.png.jpg"

        result = render_thumbnail(str(source), str(output))

        assert result["success"] is True
        with Image.open(output) as img:
            assert img.mode == "RGB"

    def test_custom_width(self, tmp_path, make_image):
        """Test the configured width is honoured."""
        source = make_image(tmp_path / "a.jpg", size=(1000, 500))
        output = tmp_path / "out.jpg"

        result = render_thumbnail(str(source), str(output), width=320, quality=70)

        assert result["thumbnail_size"] == (320, 160)

    def test_quality_is_clamped(self):
        """Test out-of-range JPEG quality is clamped."""
        assert ThumbnailGenerator(quality=500).quality == 95
        assert ThumbnailGenerator(quality=0).quality == 1

    def test_missing_source_reports_failure(self, tmp_path):
        """Test a missing source is a failed result, not an exception."""
        result = render_thumbnail(str(tmp_path / "missing.jpg"), str(tmp_path / "out.jpg"))

        assert result["success"] is False
        assert "not found" in result["error"]
        assert not (tmp_path / "out.jpg").exists()

    def test_corrupt_source_reports_failure_and_leaves_no_files(self, tmp_path):
        """Test undecodable data fails cleanly with no cache entry or temp file."""
        source = tmp_path / "corrupt.jpg"
        source.write_bytes(b"\xff\xd8\xff\xe0 definitely not a jpeg")
        cache = tmp_path / "cache"
        output = cache / "corrupt.jpg.jpg"

        result = render_thumbnail(str(source), str(output))

        assert result["success"] is False
        assert result["error"].startswith("Image processing failed")
        assert not output.exists()
        assert not cache.exists() or list(cache.iterdir()) == []

    def test_unwritable_destination_reports_failure(self, tmp_path, make_image):
        """Test a destination that cannot be created fails without raising."""
        source = make_image(tmp_path / "a.jpg")
        blocker = tmp_path / "blocker"
        blocker.write_text("a file where the cache directory should be")

        result = render_thumbnail(str(source), str(blocker / "a.jpg.jpg"))

        assert result["success"] is False

    def test_existing_entry_is_replaced_atomically(self, tmp_path, make_image):
        """Test re-rendering replaces the entry and leaves no temp files."""
        source = make_image(tmp_path / "src" / "a.jpg", size=(400, 400))
        cache = tmp_path / "cache"
        cache.mkdir()
        output = cache / "a.jpg.jpg"
        output.write_bytes(b"old")

        result = render_thumbnail(str(source), str(output))

        assert result["success"] is True
        assert output.read_bytes() != b"old"
        assert [p.name for p in cache.iterdir()] == ["a.jpg.jpg"]
