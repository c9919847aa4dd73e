# goes_browser/constants.py
"""
Global Constants for the GOES imagery browser.

Centralized location for application constants to avoid hardcoded values
throughout the codebase.
"""

import os
from typing import FrozenSet

# =============================================================================
# SOURCE TREE
# =============================================================================

DEFAULT_SOURCE_DIRECTORY = "/mnt/plexy/Weather/GOES"

# Extensions recognised as source imagery (compared case-insensitively)
DEFAULT_IMAGE_EXTENSIONS: FrozenSet[str] = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp"}
)

# =============================================================================
# THUMBNAIL CACHE
# =============================================================================

DEFAULT_CACHE_DIRECTORY = "./data/thumbnails"

THUMBNAIL_WIDTH = 200  # Target width in pixels, height follows aspect ratio
THUMBNAIL_QUALITY = 85
THUMBNAIL_MIN_QUALITY = 1
THUMBNAIL_MAX_QUALITY = 95
THUMBNAIL_FILE_EXTENSION = ".jpg"
THUMBNAIL_IMAGE_FORMAT = "JPEG"

# Atomic publish: in-progress renders live next to the final file as
# ".<final name>.<uuid>.tmp" and are never decoded as cache keys
THUMBNAIL_TEMP_PREFIX = "."
THUMBNAIL_TEMP_SUFFIX = ".tmp"

# Longest filename most filesystems accept (NAME_MAX)
CACHE_FILENAME_MAX_BYTES = 255
THUMBNAIL_TEMP_TOKEN_LENGTH = 32  # uuid4 hex

# Longest cache key whose temp file name ".<key>.jpg.<uuid>.tmp" still fits
MAX_CACHE_KEY_LENGTH = CACHE_FILENAME_MAX_BYTES - (
    len(THUMBNAIL_TEMP_PREFIX)
    + len(THUMBNAIL_FILE_EXTENSION)
    + 1
    + THUMBNAIL_TEMP_TOKEN_LENGTH
    + len(THUMBNAIL_TEMP_SUFFIX)
)

# =============================================================================
# WORKER POOL / JOB QUEUE
# =============================================================================

HOST_CPU_COUNT = os.cpu_count() or 1

DEFAULT_RENDER_WORKERS = max(2, HOST_CPU_COUNT)
DEFAULT_DISPATCH_RATE_LIMIT = max(2, HOST_CPU_COUNT)  # job starts per window
DEFAULT_DISPATCH_WINDOW_SECONDS = 1.0

THUMBNAIL_PROCESSING_TIME_WARNING_MS = 5000

WORKER_SHUTDOWN_ERROR = "Thumbnail worker shutting down"
WORKER_CRASH_ERROR = "Render worker process terminated abruptly"

# =============================================================================
# SCHEDULING
# =============================================================================

DEFAULT_RECONCILE_INTERVAL_SECONDS = 60 * 60  # every hour
DEFAULT_CHANNEL_RELOAD_INTERVAL_SECONDS = 60 * 60
SCHEDULER_MISFIRE_GRACE_TIME_SECONDS = 30

RECONCILIATION_JOB_ID = "reconcile_thumbnails"
CHANNEL_RELOAD_JOB_ID = "reload_channel_map"

# =============================================================================
# CHANNEL METADATA
# =============================================================================

DEFAULT_CHANNEL_MAP_FILE = "./goes16.map.json"

ENHANCED_CHANNEL_SUFFIX = "_enhanced"
ENHANCED_DESCRIPTION_NOTE = (
    " This enhanced version may provide higher resolution images for more"
    " precise use."
)
ENHANCED_SHORTNAME_NOTE = " (Enhanced)"
DESCRIPTION_NOT_AVAILABLE = "Description not available."
SHORTNAME_NOT_AVAILABLE = "Shortname not available."

# =============================================================================
# API
# =============================================================================

DEFAULT_API_HOST = "0.0.0.0"
DEFAULT_API_PORT = 5000
DEFAULT_STATIC_DIRECTORY = "./public"

# =============================================================================
# LOGGING
# =============================================================================

LOG_FILE_ROTATION = "10 MB"
LOG_FILE_RETENTION = "14 days"
LOG_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[logger_name]}</cyan> | "
    "{message}"
)
LOG_FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
    "{extra[source]}:{extra[logger_name]} | {message} | {extra[context]}"
)
