# goes_browser/exceptions.py
"""
Custom exceptions for the GOES imagery browser.

Centralized location for all custom exception classes. Each exception type
represents a distinct error domain with its own handling at the HTTP
boundary (see utils/router_helpers.py).
"""

from typing import Optional


class GoesBrowserError(Exception):
    """Base exception for all application-specific errors."""

    pass


class InvalidPathError(GoesBrowserError):
    """A relative path is absolute, contains '..', or escapes its root."""

    def __init__(self, path: str, reason: str = "path escapes the configured root"):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid path {path!r}: {reason}")


class DirectoryUnavailableError(GoesBrowserError):
    """
    A source directory does not exist or cannot be read.

    Usually means the network share is not mounted or misconfigured, so it is
    surfaced to the caller and never retried.
    """

    def __init__(self, path: str, reason: Optional[str] = None):
        self.path = path
        self.reason = reason
        message = f"Directory unavailable: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class SourceNotFoundError(GoesBrowserError):
    """The requested source image does not exist."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Source file not found: {path}")


class GenerationFailedError(GoesBrowserError):
    """A render worker could not decode or encode a thumbnail."""

    def __init__(self, path: str, error: Optional[str] = None):
        self.path = path
        self.error = error
        super().__init__(
            f"Thumbnail generation failed for {path}: {error or 'unknown error'}"
        )


class MalformedKeyError(GoesBrowserError):
    """A cache key contains characters outside the codec alphabet."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed cache key {key!r}: {reason}")


class ConfigurationError(GoesBrowserError):
    """Configuration or validation errors in settings and data files."""

    pass
