from .channel_model import (
    ChannelDescriptionResponse,
    ChannelRecord,
    ChannelShortnameResponse,
)
from .reconciliation_model import ReconciliationStatus
from .render_job_model import RenderJob, RenderResult, ThumbnailWorkerStatistics
from .source_entry_model import SourceEntry

__all__ = [
    "ChannelDescriptionResponse",
    "ChannelRecord",
    "ChannelShortnameResponse",
    "ReconciliationStatus",
    "RenderJob",
    "RenderResult",
    "SourceEntry",
    "ThumbnailWorkerStatistics",
]
