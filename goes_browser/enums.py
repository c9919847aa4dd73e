# goes_browser/enums.py
"""
Application Enums - Centralized enum definitions.

Kept in one module so constants.py, the models and the services can all
import them without circular dependencies.
"""

from enum import Enum


# =============================================================================
# RENDER JOB SYSTEM
# =============================================================================


class RenderJobPriority(str, Enum):
    """Render job priority classes. Interactive jobs always dispatch first."""

    INTERACTIVE = "interactive"
    BACKGROUND = "background"


class RenderJobStatus(str, Enum):
    """Lifecycle states of a render job inside the thumbnail worker."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    DISCARDED = "discarded"


# =============================================================================
# ENVIRONMENT
# =============================================================================


class Environment(str, Enum):
    """Deployment environments accepted by Settings."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


# =============================================================================
# LOGGING SYSTEM
# =============================================================================


class LogLevel(str, Enum):
    """Log level constants for centralized logging system."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogSource(str, Enum):
    """Log source constants for identifying log origins."""

    API = "api"
    WORKER = "worker"
    SYSTEM = "system"
    SCHEDULER = "scheduler"
    PIPELINE = "pipeline"
    FILESYSTEM = "filesystem"


class LogEmoji(str, Enum):
    """Type-safe emoji constants for log messages."""

    # Request/Response emojis
    INCOMING = "📥"
    OUTGOING = "📤"

    # Status emojis
    SUCCESS = "✅"
    PENDING = "⏳"
    FAILED = "❌"
    ERROR = "❌"
    WARNING = "⚠️"
    INFO = "ℹ️"
    DEBUG = "🐞"
    CRITICAL = "☠️"

    # Work emojis
    PROCESSING = "🔄"
    JOB = "🔄"
    RUNNING = "▶️"
    STOPPED = "⏹️"

    # Imagery emojis
    IMAGE = "🖼️"
    THUMBNAIL = "🖼️"
    SATELLITE = "🛰️"

    # System emojis
    SYSTEM = "⚙️"
    STARTUP = "🚀"
    SHUTDOWN = "🛑"
    HEALTH = "💓"
    SECURITY = "🔒"
    CACHE = "🗄️"
    STORAGE = "💾"
    RELOAD = "🔁"

    # Worker emojis
    WORKER = "👷"
    SCHEDULER = "⏰"
    QUEUE = "📋"
    SEARCH = "🔍"
    CHART = "📊"


class LoggerName(str, Enum):
    """Logger name constants for categorizing log entries."""

    # API/Request loggers
    API = "api"
    ROUTER = "router"

    # Worker loggers
    THUMBNAIL_WORKER = "thumbnail_worker"
    RENDER_POOL = "render_pool"
    SCHEDULER_WORKER = "scheduler_worker"

    # Pipeline loggers
    THUMBNAIL_PIPELINE = "thumbnail_pipeline"

    # Service loggers
    THUMBNAIL_CACHE_SERVICE = "thumbnail_cache_service"
    RECONCILIATION_SERVICE = "reconciliation_service"
    DIRECTORY_INDEXER = "directory_indexer"
    CHANNEL_SERVICE = "channel_service"

    # System loggers
    SYSTEM = "system"
    UTILITY = "utility"
    TEST = "test"
