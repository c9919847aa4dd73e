#!/usr/bin/env python3
# tests/conftest.py
"""
Pytest configuration and shared fixtures for GOES browser tests.
"""

from pathlib import Path
from typing import Callable, Tuple

import pytest
from PIL import Image

from goes_browser.config import Settings
from tests.fakes import FakeRenderPool


@pytest.fixture
def make_image() -> Callable[..., Path]:
    """Factory writing a real image file of the given size and format."""

    def _make_image(
        path: Path,
        size: Tuple[int, int] = (400, 300),
        color=(30, 60, 200),
        mode: str = "RGB",
        image_format: str = "JPEG",
    ) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path, image_format)
        return path

    return _make_image


@pytest.fixture
def source_root(tmp_path) -> Path:
    root = tmp_path / "goes"
    root.mkdir()
    return root


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    cache = tmp_path / "thumbnails"
    cache.mkdir()
    return cache


@pytest.fixture
def source_tree(source_root, make_image) -> Path:
    """
    Small satellite-style tree:

        GOES16/FD/GEOCOLOR/2024001.jpg
        GOES16/FD/GEOCOLOR/2024002.png
        GOES16/FD/GEOCOLOR/notes.txt
        GOES16/CONUS/Band02/2024001.JPG
        GOES18/readme.md
    """
    geocolor = source_root / "GOES16" / "FD" / "GEOCOLOR"
    make_image(geocolor / "2024001.jpg")
    make_image(geocolor / "2024002.png", image_format="PNG")
    (geocolor / "notes.txt").write_text("not an image")
    make_image(source_root / "GOES16" / "CONUS" / "Band02" / "2024001.JPG", size=(100, 100))
    (source_root / "GOES18").mkdir()
    (source_root / "GOES18" / "readme.md").write_text("empty")
    return source_root


@pytest.fixture
def image_extensions():
    return frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp"})


@pytest.fixture
def fake_render_pool() -> FakeRenderPool:
    return FakeRenderPool(size=4)


@pytest.fixture
def test_settings(tmp_path, source_root, cache_dir) -> Settings:
    """Settings pointing at temporary directories, no startup scan."""
    channel_map = tmp_path / "goes16.map.json"
    channel_map.write_text(
        '{"ABI-Band02": {"shortname": "Red", "description": "Visible red band."},'
        ' "ABI-Band13": {"description": "Clean longwave infrared window."}}'
    )
    return Settings(
        source_directory=str(source_root),
        cache_directory=str(cache_dir),
        static_directory=str(tmp_path / "public"),
        channel_map_file=str(channel_map),
        reconcile_on_startup=False,
        render_workers=2,
        dispatch_rate_limit=50,
        dispatch_window_seconds=0.1,
        _env_file=None,
    )
