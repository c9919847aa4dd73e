"""
Base worker class for the GOES browser worker architecture.

Provides common interfaces and utilities for all worker types.

Lifecycle:
- start()/stop() set the running flag and call initialize()/cleanup()
- workers that process a queue start their own background task from
  initialize() and cancel it from cleanup()
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..enums import LogEmoji, LoggerName, LogSource
from ..services.logger import ServiceLogger, get_service_logger


class BaseWorker(ABC):
    """
    Abstract base class for all workers.

    Each worker is responsible for a specific domain of functionality.
    """

    def __init__(self, name: str, logger_name: LoggerName = LoggerName.SYSTEM):
        """
        Initialize base worker.

        Args:
            name: Worker name for logging and identification
            logger_name: Logger identity used for this worker's messages
        """
        self.name = name
        self.running = False
        self.logger: ServiceLogger = get_service_logger(logger_name, LogSource.WORKER)

    async def start(self) -> None:
        """Start the worker."""
        if self.running:
            return
        self.logger.info(f"Starting {self.name} worker", emoji=LogEmoji.STARTUP)
        self.running = True
        await self.initialize()

    async def stop(self) -> None:
        """Stop the worker."""
        if not self.running:
            return
        self.logger.info(f"Stopping {self.name} worker", emoji=LogEmoji.SHUTDOWN)
        self.running = False
        await self.cleanup()

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize worker-specific resources."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup worker-specific resources."""
        pass

    def log_info(self, message: str, **kwargs: Any) -> None:
        """Log info message with worker name prefix."""
        self.logger.info(f"[{self.name}] {message}", **kwargs)

    def log_error(self, message: str, error: Optional[Exception] = None) -> None:
        """Log error message with worker name prefix."""
        self.logger.error(f"[{self.name}] {message}", exception=error)

    def log_warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with worker name prefix."""
        self.logger.warning(f"[{self.name}] {message}", **kwargs)

    def log_debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with worker name prefix."""
        self.logger.debug(f"[{self.name}] {message}", **kwargs)

    def log_job_metrics(self, processed: int, failed: int, success_rate: float) -> None:
        """
        Log job processing metrics with worker name prefix.

        Args:
            processed: Number of jobs processed successfully
            failed: Number of jobs that failed
            success_rate: Success rate as a percentage
        """
        self.logger.info(
            f"[{self.name}] Jobs processed: {processed}, failed: {failed}, "
            f"success rate: {success_rate:.1f}%",
            emoji=LogEmoji.CHART,
        )

    def get_status(self) -> Dict[str, Any]:
        """
        Get current worker status.

        Returns:
            Dictionary with worker status information
        """
        return {
            "name": self.name,
            "running": self.running,
            "worker_type": self.__class__.__name__,
        }

    def is_healthy(self) -> bool:
        """Check if worker is in a healthy state."""
        return self.running
