from .thumbnail_generator import (
    ThumbnailGenerator,
    calculate_thumbnail_dimensions,
    render_thumbnail,
)

__all__ = ["ThumbnailGenerator", "calculate_thumbnail_dimensions", "render_thumbnail"]
