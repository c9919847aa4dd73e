# goes_browser/models/render_job_model.py
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from ..enums import RenderJobPriority


class RenderJob(BaseModel):
    """A request to render one source image into one cache entry.

    Identity is the destination path: two jobs for the same destination are
    the same unit of work.
    """

    source_path: str
    destination_path: str
    priority: RenderJobPriority = RenderJobPriority.BACKGROUND

    model_config = ConfigDict(frozen=True)


class RenderResult(BaseModel):
    """Result reported by a render worker"""

    success: bool
    source_path: str
    destination_path: str
    error: Optional[str] = None
    source_size: Optional[Tuple[int, int]] = None
    thumbnail_size: Optional[Tuple[int, int]] = None
    file_size: Optional[int] = None
    processing_time_ms: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ThumbnailWorkerStatistics(BaseModel):
    """Snapshot of the thumbnail worker's queue and counters"""

    running: bool
    pending_interactive: int = 0
    pending_background: int = 0
    in_flight: int = 0
    dispatched_jobs_total: int = 0
    processed_jobs_total: int = 0
    failed_jobs_total: int = 0
    discarded_jobs_total: int = 0
    deduplicated_requests_total: int = 0
    already_cached_jobs_total: int = 0  # finished without rendering
    success_rate_percent: float = 0.0
    render_workers: int = 0
    dispatch_rate_limit: int = 0
    dispatch_window_seconds: float = 0.0
