# goes_browser/workers/scheduler_worker.py
"""
Scheduler Worker - the periodic timers.

Owns an APScheduler AsyncIOScheduler with two interval jobs:
- reconciliation scan (optionally first run right at startup)
- channel map reload

Job bodies live in the services; this worker only decides when they run and
records how each run went.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from ..constants import (
    CHANNEL_RELOAD_JOB_ID,
    DEFAULT_CHANNEL_RELOAD_INTERVAL_SECONDS,
    DEFAULT_RECONCILE_INTERVAL_SECONDS,
    RECONCILIATION_JOB_ID,
    SCHEDULER_MISFIRE_GRACE_TIME_SECONDS,
)
from ..enums import LogEmoji, LoggerName
from .base_worker import BaseWorker

if TYPE_CHECKING:
    from ..services.channel_service import ChannelService
    from ..services.reconciliation_service import ReconciliationService


class SchedulerWorker(BaseWorker):
    """
    Interval scheduling for reconciliation and channel map reloads.
    """

    def __init__(
        self,
        reconciliation_service: "ReconciliationService",
        channel_service: "ChannelService",
        reconcile_interval_seconds: int = DEFAULT_RECONCILE_INTERVAL_SECONDS,
        channel_reload_interval_seconds: int = DEFAULT_CHANNEL_RELOAD_INTERVAL_SECONDS,
        reconcile_on_startup: bool = True,
    ):
        """
        Args:
            reconciliation_service: Service whose scan() is run periodically
            channel_service: Service whose reload() is run periodically
            reconcile_interval_seconds: Seconds between reconciliation scans
            channel_reload_interval_seconds: Seconds between channel map reloads
            reconcile_on_startup: Run the first scan immediately instead of after one interval
        """
        super().__init__("SchedulerWorker", LoggerName.SCHEDULER_WORKER)
        self.reconciliation_service = reconciliation_service
        self.channel_service = channel_service
        self.reconcile_interval_seconds = reconcile_interval_seconds
        self.channel_reload_interval_seconds = channel_reload_interval_seconds
        self.reconcile_on_startup = reconcile_on_startup

        self.scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self.job_registry: Dict[str, Job] = {}
        self.job_runs: Dict[str, Dict[str, Any]] = {}

    async def initialize(self) -> None:
        """Start the scheduler and register the standard jobs."""
        self.start_scheduler()
        self.add_standard_jobs()
        self.log_info(
            f"Scheduler initialized with {len(self.job_registry)} jobs",
            emoji=LogEmoji.SUCCESS,
            extra_context={"job_ids": list(self.job_registry.keys())},
        )

    async def cleanup(self) -> None:
        """Stop the scheduler without waiting for running jobs."""
        self.stop_scheduler()
        self.job_registry.clear()

    # ===== APScheduler Management =====

    def start_scheduler(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            self.log_info("Scheduler started successfully", emoji=LogEmoji.SCHEDULER)

    def stop_scheduler(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            self.log_info("Scheduler stopped", emoji=LogEmoji.STOPPED)

    def add_job(self, job_id: str, func: Callable, trigger: str, **kwargs: Any) -> bool:
        """
        Add a job to the scheduler with standard configuration.

        Args:
            job_id: Unique job identifier
            func: Function to execute
            trigger: APScheduler trigger type
            **kwargs: Additional scheduler arguments

        Returns:
            True if job was added successfully
        """
        if job_id in self.job_registry:
            self.remove_job(job_id)

        kwargs.setdefault("max_instances", 1)
        kwargs.setdefault("coalesce", True)
        kwargs.setdefault("misfire_grace_time", SCHEDULER_MISFIRE_GRACE_TIME_SECONDS)

        try:
            job = self.scheduler.add_job(
                func=self._create_tracked_job_wrapper(job_id, func),
                trigger=trigger,
                id=job_id,
                **kwargs,
            )
        except Exception as e:
            self.log_error(f"Failed to add job {job_id}", e)
            return False

        self.job_registry[job_id] = job
        self.log_debug(f"Added job {job_id}")
        return True

    def remove_job(self, job_id: str) -> None:
        if job_id in self.job_registry:
            self.scheduler.remove_job(job_id)
            del self.job_registry[job_id]
            self.log_debug(f"Removed job {job_id}")

    def add_standard_jobs(self) -> None:
        """Register reconciliation and channel reload interval jobs."""
        reconcile_kwargs: Dict[str, Any] = {}
        if self.reconcile_on_startup:
            reconcile_kwargs["next_run_time"] = datetime.now(timezone.utc)

        self.add_job(
            RECONCILIATION_JOB_ID,
            self.reconciliation_service.scan,
            trigger="interval",
            seconds=self.reconcile_interval_seconds,
            **reconcile_kwargs,
        )
        self.add_job(
            CHANNEL_RELOAD_JOB_ID,
            self._reload_channel_map,
            trigger="interval",
            seconds=self.channel_reload_interval_seconds,
        )

    async def _reload_channel_map(self) -> bool:
        return self.channel_service.reload()

    def _create_tracked_job_wrapper(self, job_id: str, func: Callable) -> Callable:
        """Wrap a coroutine function so each run's outcome is recorded."""

        async def tracked_wrapper() -> Any:
            started_at = datetime.now(timezone.utc)
            record = self.job_runs.setdefault(job_id, {"runs": 0, "failures": 0})
            record["runs"] += 1
            record["last_run_time"] = started_at
            try:
                result = await func()
            except Exception as e:
                record["failures"] += 1
                record["last_error"] = str(e)
                self.log_error(f"Job {job_id} failed", e)
                raise

            elapsed = (datetime.now(timezone.utc) - started_at).total_seconds()
            record["last_success_time"] = datetime.now(timezone.utc)
            self.log_debug(
                f"Job {job_id} completed successfully in {elapsed:.2f}s",
                emoji=LogEmoji.SUCCESS,
            )
            return result

        tracked_wrapper.__name__ = f"tracked_{getattr(func, '__name__', job_id)}"
        return tracked_wrapper

    # ===== Status =====

    def get_next_run_time(self, job_id: str) -> Optional[datetime]:
        job = self.scheduler.get_job(job_id) if job_id in self.job_registry else None
        return job.next_run_time if job is not None else None

    def get_status(self) -> Dict[str, Any]:
        """Scheduler status with per-job timing."""
        return {
            **super().get_status(),
            "scheduler_running": self.scheduler.running,
            "total_jobs": len(self.job_registry),
            "jobs": {
                job_id: {
                    "next_run_time": self.get_next_run_time(job_id),
                    **self.job_runs.get(job_id, {}),
                }
                for job_id in self.job_registry
            },
        }
