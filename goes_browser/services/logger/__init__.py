"""
Centralized Logger Service Module.

A unified logging interface with a structured, type-safe logging system.

Usage:
    from goes_browser.services.logger import get_service_logger
    from goes_browser.enums import LoggerName, LogSource

    logger = get_service_logger(LoggerName.THUMBNAIL_WORKER, LogSource.WORKER)
    logger.info("Worker started", extra_context={"workers": 4})
"""

# Re-export commonly used enums for convenience
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource
from .logger_service import ServiceLogger, configure_logging, get_service_logger

__all__ = [
    "ServiceLogger",
    "configure_logging",
    "get_service_logger",
    # Enums
    "LogLevel",
    "LogSource",
    "LoggerName",
    "LogEmoji",
]
