# goes_browser/models/reconciliation_model.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ReconciliationStatus(BaseModel):
    """Progress of the current (or last) reconciliation scan"""

    active: bool = False
    total: int = 0  # source files lacking a cache entry
    processed: int = 0  # of those, how many were handed to the worker
    enqueued: int = 0  # new jobs (the rest attached to existing jobs)
    source_files: int = 0
    cached_entries: int = 0
    skipped_keys: int = 0  # cache filenames that failed to decode
    skipped_sources: int = 0  # source paths too long for a cache entry name
    scans_completed: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    last_error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
