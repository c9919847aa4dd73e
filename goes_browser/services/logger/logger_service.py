"""
Centralized Logger Service for the GOES imagery browser.

Provides a unified logging interface on top of loguru:
- Console output with emoji support
- Optional file logging with rotation and retention
- Structured context bound to every record (logger name, source, extra context)

Architecture:
- Type-safe enum-based configuration (LoggerName, LogSource, LogEmoji)
- Service loggers are thin facades over loguru's bound loggers
- configure_logging() is idempotent and may be called again to reconfigure
"""

import sys
from typing import Any, Dict, Optional

from loguru import logger

from ...constants import (
    LOG_CONSOLE_FORMAT,
    LOG_FILE_FORMAT,
    LOG_FILE_RETENTION,
    LOG_FILE_ROTATION,
)
from ...enums import LogEmoji, LoggerName, LogLevel, LogSource

# Defaults so records emitted through the bare loguru logger still format
_DEFAULT_EXTRA: Dict[str, Any] = {
    "logger_name": LoggerName.SYSTEM.value,
    "source": LogSource.SYSTEM.value,
    "context": {},
}

logger.configure(extra=_DEFAULT_EXTRA)


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    log_file: Optional[str] = None,
    enable_console: bool = True,
) -> None:
    """
    Install the console and (optional) file sinks.

    Args:
        level: Minimum level for all sinks
        log_file: Path of a rotating log file, or None to disable file logging
        enable_console: Whether to write to stderr
    """
    logger.remove()
    logger.configure(extra=_DEFAULT_EXTRA)

    if enable_console:
        logger.add(
            sys.stderr,
            level=level.value,
            format=LOG_CONSOLE_FORMAT,
            colorize=sys.stderr.isatty(),
            backtrace=False,
            diagnose=False,
        )

    if log_file:
        logger.add(
            log_file,
            level=level.value,
            format=LOG_FILE_FORMAT,
            rotation=LOG_FILE_ROTATION,
            retention=LOG_FILE_RETENTION,
            compression="gz",
            enqueue=True,
            encoding="utf-8",
        )


class ServiceLogger:
    """
    Pre-configured logger for one service.

    Emoji priority system (highest to lowest):
    1. Direct: Emoji passed directly to log method call
    2. Instance-set: Default emoji set when creating the service logger
    3. Fallback: Default emoji based on log level
    """

    def __init__(
        self,
        logger_name: LoggerName,
        source: LogSource = LogSource.SYSTEM,
        default_emoji: Optional[LogEmoji] = None,
    ):
        self.logger_name = logger_name
        self.source = source
        self.default_emoji = default_emoji
        self._logger = logger.bind(
            logger_name=logger_name.value, source=source.value
        )

    def _resolve_emoji(
        self, method_emoji: Optional[LogEmoji], fallback_emoji: LogEmoji
    ) -> LogEmoji:
        if method_emoji is not None:
            return method_emoji
        if self.default_emoji is not None:
            return self.default_emoji
        return fallback_emoji

    def _emit(
        self,
        level: str,
        message: str,
        emoji: LogEmoji,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        # depth=2 attributes the record to the caller of info()/error()
        self._logger.bind(context=context or {}).opt(
            depth=2, exception=exception
        ).log(level, f"{emoji.value} {message}")

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        error_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
        **kwargs,
    ) -> None:
        """Log an error with emoji priority system."""
        self._emit(
            "ERROR",
            message,
            self._resolve_emoji(emoji, LogEmoji.ERROR),
            context=error_context or kwargs.get("extra_context"),
            exception=exception,
        )

    def warning(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
        **kwargs,
    ) -> None:
        """Log a warning with emoji priority system."""
        self._emit(
            "WARNING",
            message,
            self._resolve_emoji(emoji, LogEmoji.WARNING),
            context=extra_context,
        )

    def info(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
        **kwargs,
    ) -> None:
        """Log an info message with emoji priority system."""
        self._emit(
            "INFO",
            message,
            self._resolve_emoji(emoji, LogEmoji.INFO),
            context=extra_context,
        )

    def debug(
        self,
        message: str,
        extra_context: Optional[Dict[str, Any]] = None,
        emoji: Optional[LogEmoji] = None,
        **kwargs,
    ) -> None:
        """Log a debug message with emoji priority system."""
        self._emit(
            "DEBUG",
            message,
            self._resolve_emoji(emoji, LogEmoji.DEBUG),
            context=extra_context,
        )


def get_service_logger(
    logger_name: LoggerName,
    source: LogSource = LogSource.SYSTEM,
    default_emoji: Optional[LogEmoji] = None,
) -> ServiceLogger:
    """
    Factory function to create a pre-configured logger for a specific service.

    Args:
        logger_name: The logger name enum to use for all calls
        source: The log source enum to use for all calls (defaults to SYSTEM)
        default_emoji: Instance-level default emoji that overrides level-based fallbacks

    Example:
        from ...services.logger import get_service_logger, LogEmoji
        from ...enums import LoggerName

        logger = get_service_logger(LoggerName.THUMBNAIL_WORKER)
        logger.error("Something went wrong")  # Uses LogEmoji.ERROR (fallback)

        scan_logger = get_service_logger(
            LoggerName.RECONCILIATION_SERVICE, default_emoji=LogEmoji.SEARCH
        )
        scan_logger.info("Scan started")  # Uses LogEmoji.SEARCH (instance-set)
    """
    return ServiceLogger(logger_name, source, default_emoji)
