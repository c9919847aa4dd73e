# goes_browser/workers/thumbnail_worker.py
"""
Thumbnail Worker - deduplicating, prioritised, rate-limited render queue.

Responsibilities:
- Deduplication by destination path: every request for a destination that is
  already pending or in flight shares that job's completion future, and a
  job whose destination already exists completes without rendering
- Two priority classes: interactive jobs always dispatch before background jobs
- Bounded dispatch: a concurrency slot (one per render process) and a token
  from the DispatchRateLimiter are taken before each job starts
- Shutdown that never leaves an interactive waiter hanging
"""

import asyncio
import os
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Optional, Protocol, Set

from ..constants import (
    DEFAULT_DISPATCH_RATE_LIMIT,
    DEFAULT_DISPATCH_WINDOW_SECONDS,
    THUMBNAIL_PROCESSING_TIME_WARNING_MS,
    WORKER_SHUTDOWN_ERROR,
)
from ..enums import LogEmoji, LoggerName, RenderJobPriority, RenderJobStatus
from ..models.render_job_model import RenderJob, RenderResult, ThumbnailWorkerStatistics
from .base_worker import BaseWorker
from .rate_limiter import DispatchRateLimiter


class RenderBackend(Protocol):
    """Anything that can render a job; RenderPool in production."""

    @property
    def size(self) -> int: ...

    async def render(self, job: RenderJob) -> RenderResult: ...


@dataclass
class JobHandle:
    """Handle to the (possibly shared) job rendering one destination."""

    job: RenderJob
    future: "asyncio.Future[RenderResult]"
    deduplicated: bool = False

    @property
    def destination_path(self) -> str:
        return self.job.destination_path

    def done(self) -> bool:
        return self.future.done()


@dataclass
class _TrackedJob:
    job: RenderJob
    future: "asyncio.Future[RenderResult]"
    status: RenderJobStatus = RenderJobStatus.PENDING
    enqueued_at: float = field(default_factory=time.monotonic)


class ThumbnailWorker(BaseWorker):
    """
    Background worker that feeds render jobs to the render pool.

    Jobs can be enqueued before start(); they are dispatched once the worker
    is running.
    """

    def __init__(
        self,
        render_pool: RenderBackend,
        dispatch_rate_limit: int = DEFAULT_DISPATCH_RATE_LIMIT,
        dispatch_window_seconds: float = DEFAULT_DISPATCH_WINDOW_SECONDS,
        max_concurrent_jobs: Optional[int] = None,
    ):
        """
        Initialize ThumbnailWorker.

        Args:
            render_pool: Backend that performs the renders
            dispatch_rate_limit: Maximum job starts per dispatch window
            dispatch_window_seconds: Length of the dispatch window
            max_concurrent_jobs: In-flight job bound, defaults to the pool size
        """
        super().__init__("ThumbnailWorker", LoggerName.THUMBNAIL_WORKER)
        self.render_pool = render_pool
        self.rate_limiter = DispatchRateLimiter(
            dispatch_rate_limit, dispatch_window_seconds
        )
        self.max_concurrent_jobs = max_concurrent_jobs or render_pool.size

        self._lock = asyncio.Lock()
        self._jobs: Dict[str, _TrackedJob] = {}
        self._interactive_queue: Deque[_TrackedJob] = deque()
        self._background_queue: Deque[_TrackedJob] = deque()
        self._pending_interactive = 0
        self._pending_background = 0
        self._in_flight = 0
        self._work_available = asyncio.Event()
        self._slots = asyncio.Semaphore(self.max_concurrent_jobs)
        self._dispatch_task: Optional[asyncio.Task] = None
        self._stopped = False
        self._running_tasks: Set[asyncio.Task] = set()

        # Statistics
        self.dispatched_jobs_total = 0
        self.processed_jobs_total = 0
        self.failed_jobs_total = 0
        self.discarded_jobs_total = 0
        self.deduplicated_requests_total = 0
        self.already_cached_jobs_total = 0

    # ===== Lifecycle =====

    async def initialize(self) -> None:
        """Start the dispatch loop."""
        self._stopped = False
        self._dispatch_task = asyncio.create_task(self._dispatch_loop())
        self.log_info(
            f"Initialized with {self.max_concurrent_jobs} concurrent jobs, "
            f"{self.rate_limiter.max_starts} starts per "
            f"{self.rate_limiter.window_seconds}s",
            emoji=LogEmoji.SYSTEM,
            extra_context={
                "max_concurrent_jobs": self.max_concurrent_jobs,
                "dispatch_rate_limit": self.rate_limiter.max_starts,
                "dispatch_window_seconds": self.rate_limiter.window_seconds,
            },
        )

    async def cleanup(self) -> None:
        """Stop dispatching and resolve every pending job."""
        self._stopped = True
        if self._dispatch_task is not None:
            self._dispatch_task.cancel()
            try:
                await self._dispatch_task
            except asyncio.CancelledError:
                pass
            self._dispatch_task = None

        async with self._lock:
            pending = [
                tracked
                for tracked in self._jobs.values()
                if tracked.status is RenderJobStatus.PENDING
            ]
            for tracked in pending:
                del self._jobs[tracked.job.destination_path]
                if tracked.job.priority is RenderJobPriority.INTERACTIVE:
                    tracked.status = RenderJobStatus.FAILED
                    self.failed_jobs_total += 1
                else:
                    tracked.status = RenderJobStatus.DISCARDED
                    self.discarded_jobs_total += 1
                if not tracked.future.done():
                    tracked.future.set_result(
                        self._failed_result(tracked.job, WORKER_SHUTDOWN_ERROR)
                    )
            self._interactive_queue.clear()
            self._background_queue.clear()
            self._pending_interactive = 0
            self._pending_background = 0

        # In-flight renders are abandoned; their waiters get the shutdown error
        running = list(self._running_tasks)
        for task in running:
            task.cancel()
        if running:
            await asyncio.gather(*running, return_exceptions=True)

        stats = self.get_status()
        self.log_job_metrics(
            stats["processed_jobs_total"],
            stats["failed_jobs_total"],
            stats["success_rate_percent"],
        )
        if pending:
            self.log_info(
                f"Resolved {len(pending)} pending jobs on shutdown",
                emoji=LogEmoji.SHUTDOWN,
            )

    # ===== Queue API =====

    async def enqueue(self, job: RenderJob) -> JobHandle:
        """
        Add a render job unless one for the same destination already exists.

        Args:
            job: Render job to queue

        Returns:
            Handle sharing the completion future of the job for this destination
        """
        if self._stopped:
            rejected: "asyncio.Future[RenderResult]" = (
                asyncio.get_running_loop().create_future()
            )
            rejected.set_result(self._failed_result(job, WORKER_SHUTDOWN_ERROR))
            return JobHandle(job=job, future=rejected)

        async with self._lock:
            existing = self._jobs.get(job.destination_path)
            if existing is not None:
                self.deduplicated_requests_total += 1
                if (
                    job.priority is RenderJobPriority.INTERACTIVE
                    and existing.status is RenderJobStatus.PENDING
                    and existing.job.priority is RenderJobPriority.BACKGROUND
                ):
                    self._upgrade(existing)
                return JobHandle(
                    job=existing.job, future=existing.future, deduplicated=True
                )

            future: "asyncio.Future[RenderResult]" = (
                asyncio.get_running_loop().create_future()
            )
            tracked = _TrackedJob(job=job, future=future)
            self._jobs[job.destination_path] = tracked
            if job.priority is RenderJobPriority.INTERACTIVE:
                self._interactive_queue.append(tracked)
                self._pending_interactive += 1
            else:
                self._background_queue.append(tracked)
                self._pending_background += 1
            self._work_available.set()

        self.log_debug(
            f"Queued {job.priority.value} job for {job.source_path}",
            emoji=LogEmoji.QUEUE,
        )
        return JobHandle(job=job, future=future)

    async def await_completion(self, handle: JobHandle) -> RenderResult:
        """
        Wait for the job behind a handle to finish.

        Cancelling the caller does not cancel the shared job.
        """
        return await asyncio.shield(handle.future)

    def _upgrade(self, tracked: _TrackedJob) -> None:
        # The stale entry left in the background queue is skipped when popped
        tracked.job = tracked.job.model_copy(
            update={"priority": RenderJobPriority.INTERACTIVE}
        )
        self._interactive_queue.append(tracked)
        self._pending_background -= 1
        self._pending_interactive += 1
        self.log_debug(
            f"Upgraded job for {tracked.job.source_path} to interactive",
            emoji=LogEmoji.PROCESSING,
        )

    def _pop_next(self) -> Optional[_TrackedJob]:
        for queue, priority in (
            (self._interactive_queue, RenderJobPriority.INTERACTIVE),
            (self._background_queue, RenderJobPriority.BACKGROUND),
        ):
            while queue:
                tracked = queue.popleft()
                if (
                    tracked.status is RenderJobStatus.PENDING
                    and tracked.job.priority is priority
                ):
                    if priority is RenderJobPriority.INTERACTIVE:
                        self._pending_interactive -= 1
                    else:
                        self._pending_background -= 1
                    return tracked
        return None

    def _has_pending(self) -> bool:
        return (self._pending_interactive + self._pending_background) > 0

    # ===== Dispatch =====

    async def _dispatch_loop(self) -> None:
        """Start pending jobs as capacity and the rate limit allow."""
        while self.running:
            while not self._has_pending():
                self._work_available.clear()
                await self._work_available.wait()

            await self._slots.acquire()
            tracked: Optional[_TrackedJob] = None
            try:
                await self.rate_limiter.acquire()
                async with self._lock:
                    tracked = self._pop_next()
                    if tracked is not None:
                        tracked.status = RenderJobStatus.PROCESSING
                        self._in_flight += 1
            finally:
                if tracked is None:
                    self._slots.release()

            if tracked is None:
                continue

            self.dispatched_jobs_total += 1
            task = asyncio.create_task(self._run_job(tracked))
            self._running_tasks.add(task)
            task.add_done_callback(self._running_tasks.discard)

    async def _run_job(self, tracked: _TrackedJob) -> None:
        job = tracked.job
        result = self._failed_result(job, WORKER_SHUTDOWN_ERROR)
        try:
            # A job for this destination may have finished between a caller's
            # cache check and its enqueue
            if await asyncio.to_thread(os.path.isfile, job.destination_path):
                self.already_cached_jobs_total += 1
                result = RenderResult(
                    success=True,
                    source_path=job.source_path,
                    destination_path=job.destination_path,
                    processing_time_ms=0,
                )
            else:
                result = await self.render_pool.render(job)
        except Exception as e:
            self.log_error(f"Render backend raised for {job.source_path}", e)
            result = self._failed_result(job, f"{type(e).__name__}: {e}")
        finally:
            self._slots.release()
            await self._complete(tracked, result)

    async def _complete(self, tracked: _TrackedJob, result: RenderResult) -> None:
        async with self._lock:
            self._in_flight -= 1
            if self._jobs.get(tracked.job.destination_path) is tracked:
                del self._jobs[tracked.job.destination_path]

        if result.success:
            tracked.status = RenderJobStatus.COMPLETED
            self.processed_jobs_total += 1
            if (
                result.processing_time_ms is not None
                and result.processing_time_ms > THUMBNAIL_PROCESSING_TIME_WARNING_MS
            ):
                self.log_warning(
                    f"Slow thumbnail render: {tracked.job.source_path} "
                    f"took {result.processing_time_ms}ms",
                    extra_context={
                        "processing_time_ms": result.processing_time_ms,
                        "threshold_ms": THUMBNAIL_PROCESSING_TIME_WARNING_MS,
                    },
                )
        else:
            tracked.status = RenderJobStatus.FAILED
            self.failed_jobs_total += 1
            self.log_warning(
                f"Thumbnail job for {tracked.job.source_path} failed: {result.error}",
                emoji=LogEmoji.FAILED,
                extra_context={
                    "source_path": tracked.job.source_path,
                    "priority": tracked.job.priority.value,
                },
            )

        if not tracked.future.done():
            tracked.future.set_result(result)

    @staticmethod
    def _failed_result(job: RenderJob, error: str) -> RenderResult:
        return RenderResult(
            success=False,
            source_path=job.source_path,
            destination_path=job.destination_path,
            error=error,
        )

    # ===== Status =====

    def get_statistics(self) -> ThumbnailWorkerStatistics:
        finished = self.processed_jobs_total + self.failed_jobs_total
        success_rate = (
            self.processed_jobs_total / finished * 100 if finished else 0.0
        )
        return ThumbnailWorkerStatistics(
            running=self.running,
            pending_interactive=self._pending_interactive,
            pending_background=self._pending_background,
            in_flight=self._in_flight,
            dispatched_jobs_total=self.dispatched_jobs_total,
            processed_jobs_total=self.processed_jobs_total,
            failed_jobs_total=self.failed_jobs_total,
            discarded_jobs_total=self.discarded_jobs_total,
            deduplicated_requests_total=self.deduplicated_requests_total,
            already_cached_jobs_total=self.already_cached_jobs_total,
            success_rate_percent=round(success_rate, 1),
            render_workers=self.max_concurrent_jobs,
            dispatch_rate_limit=self.rate_limiter.max_starts,
            dispatch_window_seconds=self.rate_limiter.window_seconds,
        )

    def get_status(self) -> Dict[str, Any]:
        """Worker status merged with queue statistics."""
        return {**super().get_status(), **self.get_statistics().model_dump()}
