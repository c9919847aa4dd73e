# goes_browser/services/thumbnail_pipeline/thumbnail_generator.py
"""
Thumbnail Generator Component

Decodes one source image and publishes one fixed-width JPEG preview.

Runs inside render worker processes (see workers/render_pool.py), so it must
stay picklable and must never raise: every failure is reported through the
returned result dict.
"""

import os
import time
import uuid
from pathlib import Path
from typing import Any, Dict, Tuple

from PIL import Image

from ...constants import (
    THUMBNAIL_IMAGE_FORMAT,
    THUMBNAIL_MAX_QUALITY,
    THUMBNAIL_MIN_QUALITY,
    THUMBNAIL_QUALITY,
    THUMBNAIL_TEMP_PREFIX,
    THUMBNAIL_TEMP_SUFFIX,
    THUMBNAIL_WIDTH,
)
from ...enums import LoggerName, LogSource
from ..logger import get_service_logger

logger = get_service_logger(LoggerName.THUMBNAIL_PIPELINE, LogSource.PIPELINE)


def temp_path_for(output_path: Path) -> Path:
    """Hidden, unique sibling path used while a preview is being written."""
    return output_path.with_name(
        f"{THUMBNAIL_TEMP_PREFIX}{output_path.name}.{uuid.uuid4().hex}{THUMBNAIL_TEMP_SUFFIX}"
    )


def calculate_thumbnail_dimensions(
    source_size: Tuple[int, int], target_width: int
) -> Tuple[int, int]:
    """
    Calculate preview dimensions for a fixed width, preserving aspect ratio.

    Args:
        source_size: (width, height) of source image
        target_width: Width of the preview

    Returns:
        (width, height) of the preview; height is at least one pixel
    """
    source_width, source_height = source_size
    new_height = max(1, round(source_height * target_width / source_width))
    return (target_width, new_height)


class ThumbnailGenerator:
    """
    Component responsible for generating fixed-width previews.

    Images are resized so their width equals the target (up- or down-scaled),
    encoded as JPEG and published with write-then-rename so a cache entry is
    never visible half written.
    """

    def __init__(self, width: int = THUMBNAIL_WIDTH, quality: int = THUMBNAIL_QUALITY):
        """
        Initialize thumbnail generator.

        Args:
            width: Preview width in pixels
            quality: JPEG compression quality (1-95)
        """
        self.width = width
        self.quality = max(THUMBNAIL_MIN_QUALITY, min(THUMBNAIL_MAX_QUALITY, quality))

    def generate_thumbnail(self, source_path: str, output_path: str) -> Dict[str, Any]:
        """
        Generate a preview from source image.

        Args:
            source_path: Path to source image file
            output_path: Final cache entry path

        Returns:
            Dict with the RenderResult fields
        """
        start_time = time.perf_counter()
        result = self._generate_thumbnail_image(Path(source_path), Path(output_path))
        result["processing_time_ms"] = int((time.perf_counter() - start_time) * 1000)

        if result["success"]:
            logger.debug(f"Generated thumbnail: {Path(output_path).name}")
        else:
            logger.warning(
                f"Failed to generate thumbnail for {source_path}: {result['error']}",
                extra_context={"source_path": source_path, "output_path": output_path},
            )
        return result

    def _generate_thumbnail_image(
        self, source_path: Path, output_path: Path
    ) -> Dict[str, Any]:
        """
        Internal method to perform the decode, resize and atomic publish.
        """
        base_result: Dict[str, Any] = {
            "source_path": str(source_path),
            "destination_path": str(output_path),
        }

        if not source_path.is_file():
            return {**base_result, "success": False, "error": "Source file not found"}

        temp_path = temp_path_for(output_path)
        try:
            with Image.open(source_path) as img:
                source_size = img.size
                thumbnail_size = calculate_thumbnail_dimensions(source_size, self.width)

                # Let JPEG decoders scale down while decoding to bound memory use
                img.draft("RGB", thumbnail_size)

                if img.mode not in ("RGB", "L"):
                    img = img.convert("RGB")

                thumbnail = img.resize(thumbnail_size, Image.Resampling.LANCZOS)

            output_path.parent.mkdir(parents=True, exist_ok=True)
            thumbnail.save(
                temp_path,
                THUMBNAIL_IMAGE_FORMAT,
                quality=self.quality,
                optimize=True,
                progressive=True,
            )
            os.replace(temp_path, output_path)

            return {
                **base_result,
                "success": True,
                "source_size": source_size,
                "thumbnail_size": thumbnail_size,
                "file_size": output_path.stat().st_size,
            }

        except Exception as e:
            try:
                temp_path.unlink(missing_ok=True)
            except OSError:
                # Parent is missing or not a directory, so nothing was written
                pass
            return {
                **base_result,
                "success": False,
                "error": f"Image processing failed: {type(e).__name__}: {e}",
            }


def render_thumbnail(
    source_path: str,
    output_path: str,
    width: int = THUMBNAIL_WIDTH,
    quality: int = THUMBNAIL_QUALITY,
) -> Dict[str, Any]:
    """
    Process-pool entry point: render one preview.

    Kept at module level so ProcessPoolExecutor can pickle it.
    """
    return ThumbnailGenerator(width=width, quality=quality).generate_thumbnail(
        source_path, output_path
    )
