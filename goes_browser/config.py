# goes_browser/config.py
from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_API_HOST,
    DEFAULT_API_PORT,
    DEFAULT_CACHE_DIRECTORY,
    DEFAULT_CHANNEL_MAP_FILE,
    DEFAULT_CHANNEL_RELOAD_INTERVAL_SECONDS,
    DEFAULT_DISPATCH_RATE_LIMIT,
    DEFAULT_DISPATCH_WINDOW_SECONDS,
    DEFAULT_IMAGE_EXTENSIONS,
    DEFAULT_RECONCILE_INTERVAL_SECONDS,
    DEFAULT_RENDER_WORKERS,
    DEFAULT_SOURCE_DIRECTORY,
    DEFAULT_STATIC_DIRECTORY,
    THUMBNAIL_MAX_QUALITY,
    THUMBNAIL_MIN_QUALITY,
    THUMBNAIL_QUALITY,
    THUMBNAIL_WIDTH,
)
from .enums import Environment, LogLevel


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and make sure it starts with a dot."""
    extension = extension.strip().lower()
    if extension and not extension.startswith("."):
        extension = f".{extension}"
    return extension


class Settings(BaseSettings):
    environment: str = Environment.DEVELOPMENT.value

    # API
    api_host: str = Field(default=DEFAULT_API_HOST, description="API host to bind to")
    api_port: int = Field(
        default=DEFAULT_API_PORT, ge=1, le=65535, description="API port to bind to"
    )

    # ============= PATH CONFIGURATION =============
    # All file operations MUST resolve through these settings

    source_directory: str = Field(
        default=DEFAULT_SOURCE_DIRECTORY,
        description="Root of the (read-only) satellite imagery tree",
    )
    cache_directory: str = Field(
        default=DEFAULT_CACHE_DIRECTORY,
        description="Directory holding generated <key>.jpg previews",
    )
    static_directory: str = Field(
        default=DEFAULT_STATIC_DIRECTORY,
        description="Frontend assets served at / when the directory exists",
    )
    channel_map_file: str = Field(
        default=DEFAULT_CHANNEL_MAP_FILE,
        description="JSON table of channel id -> {shortname, description}",
    )

    @property
    def source_path(self) -> Path:
        """Get source directory as Path object"""
        return Path(self.source_directory)

    @property
    def cache_path(self) -> Path:
        """Get cache directory as Path object"""
        return Path(self.cache_directory)

    @property
    def static_path(self) -> Path:
        """Get static asset directory as Path object"""
        return Path(self.static_directory)

    def ensure_directories(self) -> None:
        """Create the cache directory if it doesn't exist"""
        self.cache_path.mkdir(parents=True, exist_ok=True)

    # Source imagery - can be set via IMAGE_EXTENSIONS as comma-separated string
    image_extensions: Union[str, List[str]] = Field(
        default=sorted(DEFAULT_IMAGE_EXTENSIONS),
        description="Recognised image extensions. Can be comma-separated string.",
    )

    @property
    def image_extension_set(self) -> FrozenSet[str]:
        """Normalised, case-insensitive set of recognised extensions"""
        if isinstance(self.image_extensions, str):
            raw = self.image_extensions.split(",")
        else:
            raw = self.image_extensions
        return frozenset(normalize_extension(ext) for ext in raw if ext.strip())

    # Thumbnail rendering
    thumbnail_width: int = Field(
        default=THUMBNAIL_WIDTH, ge=16, le=4096, description="Preview width in pixels"
    )
    thumbnail_quality: int = Field(
        default=THUMBNAIL_QUALITY,
        ge=THUMBNAIL_MIN_QUALITY,
        le=THUMBNAIL_MAX_QUALITY,
        description="JPEG quality of generated previews",
    )

    # Worker pool / job queue
    render_workers: int = Field(
        default=DEFAULT_RENDER_WORKERS,
        ge=1,
        description="Number of long-lived render worker processes",
    )
    dispatch_rate_limit: int = Field(
        default=DEFAULT_DISPATCH_RATE_LIMIT,
        ge=1,
        description="Maximum render job starts per dispatch window",
    )
    dispatch_window_seconds: float = Field(
        default=DEFAULT_DISPATCH_WINDOW_SECONDS,
        gt=0,
        description="Length of the dispatch rate-limit window in seconds",
    )

    # Scheduling
    reconcile_interval_seconds: int = Field(
        default=DEFAULT_RECONCILE_INTERVAL_SECONDS,
        ge=1,
        description="Seconds between reconciliation scans",
    )
    reconcile_on_startup: bool = Field(
        default=True, description="Run a reconciliation scan as soon as we start"
    )
    channel_reload_interval_seconds: int = Field(
        default=DEFAULT_CHANNEL_RELOAD_INTERVAL_SECONDS,
        ge=1,
        description="Seconds between channel map reloads",
    )

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (optional)"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v) -> LogLevel:
        """Validate log level is one of the allowed values"""
        if isinstance(v, LogLevel):
            return v
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(v).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values"""
        allowed_envs = [env.value for env in Environment]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(allowed_envs)}"
            )
        return v_lower

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Global settings instance
settings = Settings()
