# goes_browser/workers/render_pool.py
"""
Render Pool - fault-isolated execution of thumbnail renders.

A fixed-size ProcessPoolExecutor of long-lived worker processes runs
render_thumbnail(). A decode crash or runaway allocation in one worker can
only break that process: the pool rebuilds the executor, and every job that
shared the broken executor is rendered again in a single-process executor
of its own, so only the job that crashes its own worker fails.
"""

import asyncio
import multiprocessing
from concurrent.futures import ProcessPoolExecutor
from concurrent.futures.process import BrokenProcessPool
from typing import Any, Callable, Dict, Optional, Set

from ..constants import (
    DEFAULT_RENDER_WORKERS,
    THUMBNAIL_QUALITY,
    THUMBNAIL_WIDTH,
    WORKER_CRASH_ERROR,
)
from ..enums import LogEmoji, LoggerName, LogSource
from ..models.render_job_model import RenderJob, RenderResult
from ..services.logger import get_service_logger
from ..services.thumbnail_pipeline.thumbnail_generator import render_thumbnail

logger = get_service_logger(LoggerName.RENDER_POOL, LogSource.WORKER)

RenderFunction = Callable[[str, str, int, int], Dict[str, Any]]


class RenderPool:
    """Runs render jobs in isolated worker processes and reports RenderResults."""

    def __init__(
        self,
        max_workers: int = DEFAULT_RENDER_WORKERS,
        width: int = THUMBNAIL_WIDTH,
        quality: int = THUMBNAIL_QUALITY,
        render_fn: RenderFunction = render_thumbnail,
        start_method: str = "spawn",
    ):
        """
        Args:
            max_workers: Number of worker processes
            width: Preview width passed to every render
            quality: JPEG quality passed to every render
            render_fn: Module-level (picklable) render function
            start_method: multiprocessing start method for the workers
        """
        self.max_workers = max_workers
        self.width = width
        self.quality = quality
        self.render_fn = render_fn
        self._mp_context = multiprocessing.get_context(start_method)
        self._executor: Optional[ProcessPoolExecutor] = None
        self._isolated_executors: Set[ProcessPoolExecutor] = set()
        self.crash_count = 0

    @property
    def size(self) -> int:
        return self.max_workers

    @property
    def running(self) -> bool:
        return self._executor is not None

    def start(self) -> None:
        """Create the worker processes' executor."""
        if self._executor is None:
            self._executor = self._create_executor()
            logger.info(
                f"Render pool started with {self.max_workers} workers",
                emoji=LogEmoji.STARTUP,
                extra_context={"max_workers": self.max_workers, "width": self.width},
            )

    def shutdown(self, wait: bool = False) -> None:
        """Stop the workers; queued renders are cancelled, running ones abandoned."""
        executor, self._executor = self._executor, None
        for isolated in list(self._isolated_executors):
            isolated.shutdown(wait=False, cancel_futures=True)
        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=True)
            logger.info("Render pool stopped", emoji=LogEmoji.SHUTDOWN)

    def _create_executor(self) -> ProcessPoolExecutor:
        return ProcessPoolExecutor(
            max_workers=self.max_workers, mp_context=self._mp_context
        )

    def _replace_broken_executor(self, broken: ProcessPoolExecutor) -> None:
        # Several jobs see the same broken executor; only the first replaces it
        if self._executor is not broken:
            return
        self.crash_count += 1
        broken.shutdown(wait=False, cancel_futures=True)
        self._executor = self._create_executor()
        logger.warning(
            "Render worker process died, executor rebuilt",
            emoji=LogEmoji.WORKER,
            extra_context={"crash_count": self.crash_count},
        )

    async def render(self, job: RenderJob) -> RenderResult:
        """
        Render one job in a worker process.

        Never raises: crashes, shutdown and unexpected errors come back as a
        failed RenderResult. When a worker process dies, every job that was
        running in the broken executor is rendered again on its own, so only
        the job that killed its worker fails.
        """
        executor = self._executor
        if executor is None:
            return self._failure(job, "Render pool is not running")

        try:
            result_dict = await self._submit(executor, job)
        except BrokenProcessPool:
            self._replace_broken_executor(executor)
            return await self._render_isolated(job)
        except RuntimeError as e:
            # Submitting to an executor that is shutting down
            return self._failure(job, str(e))
        except Exception as e:
            return self._unexpected_failure(job, e)

        return self._to_result(job, result_dict)

    async def _render_isolated(self, job: RenderJob) -> RenderResult:
        """Re-run a job from a broken executor in a single-process executor of its own."""
        if self._executor is None:
            return self._failure(job, WORKER_CRASH_ERROR)

        executor = ProcessPoolExecutor(max_workers=1, mp_context=self._mp_context)
        self._isolated_executors.add(executor)
        try:
            result_dict = await self._submit(executor, job)
        except BrokenProcessPool:
            logger.warning(
                f"Render of {job.source_path} terminated its worker process",
                emoji=LogEmoji.FAILED,
                extra_context={"source_path": job.source_path},
            )
            return self._failure(job, WORKER_CRASH_ERROR)
        except RuntimeError as e:
            return self._failure(job, str(e))
        except Exception as e:
            return self._unexpected_failure(job, e)
        finally:
            self._isolated_executors.discard(executor)
            executor.shutdown(wait=False, cancel_futures=True)

        return self._to_result(job, result_dict)

    async def _submit(
        self, executor: ProcessPoolExecutor, job: RenderJob
    ) -> Dict[str, Any]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            executor,
            self.render_fn,
            job.source_path,
            job.destination_path,
            self.width,
            self.quality,
        )

    def _to_result(self, job: RenderJob, result_dict: Dict[str, Any]) -> RenderResult:
        try:
            return RenderResult(**result_dict)
        except Exception as e:
            return self._failure(job, f"Invalid render result: {e}")

    def _unexpected_failure(self, job: RenderJob, error: Exception) -> RenderResult:
        logger.error(
            f"Unexpected error rendering {job.source_path}",
            exception=error,
            error_context={"destination_path": job.destination_path},
        )
        return self._failure(job, f"{type(error).__name__}: {error}")

    @staticmethod
    def _failure(job: RenderJob, error: str) -> RenderResult:
        return RenderResult(
            success=False,
            source_path=job.source_path,
            destination_path=job.destination_path,
            error=error,
        )
