"""
Worker module for the GOES imagery browser.

This module contains the worker classes:
- RenderPool: Fault-isolated render processes
- ThumbnailWorker: Deduplicating, prioritised, rate-limited render queue
- SchedulerWorker: Periodic reconciliation and channel map reload
"""

from .base_worker import BaseWorker
from .rate_limiter import DispatchRateLimiter
from .render_pool import RenderPool
from .scheduler_worker import SchedulerWorker
from .thumbnail_worker import JobHandle, ThumbnailWorker

__all__ = [
    "BaseWorker",
    "DispatchRateLimiter",
    "JobHandle",
    "RenderPool",
    "SchedulerWorker",
    "ThumbnailWorker",
]
