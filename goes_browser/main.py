"""
FastAPI application entry point for the GOES imagery browser.

The render pool, thumbnail worker and scheduler run inside this process:
thumbnail requests await render jobs directly, so the queue has to live on
the same event loop as the request handlers.
"""

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from .config import Settings, settings
from .enums import LogEmoji, LoggerName, LogSource
from .exceptions import ConfigurationError
from .routers import browse_routers as browse
from .routers import channel_routers as channels
from .routers import health_routers as health
from .routers import thumbnail_routers as thumbnails
from .services.channel_service import ChannelService
from .services.directory_indexer import DirectoryIndexer
from .services.logger import configure_logging, get_service_logger
from .services.reconciliation_service import ReconciliationService
from .services.thumbnail_cache_service import ThumbnailCacheService
from .workers.render_pool import RenderPool
from .workers.scheduler_worker import SchedulerWorker
from .workers.thumbnail_worker import RenderBackend, ThumbnailWorker

logger = get_service_logger(LoggerName.SYSTEM, LogSource.SYSTEM)


def create_app(
    app_settings: Optional[Settings] = None,
    render_pool: Optional[RenderBackend] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        app_settings: Settings to use, defaults to the environment-derived ones
        render_pool: Render backend override; a RenderPool is created otherwise
    """
    app_settings = app_settings or settings

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        """Handle application startup and shutdown"""
        configure_logging(level=app_settings.log_level, log_file=app_settings.log_file)

        logger.info(
            "Starting GOES browser",
            emoji=LogEmoji.STARTUP,
            extra_context={
                "operation": "application_startup",
                "environment": app_settings.environment,
                "source_directory": app_settings.source_directory,
                "cache_directory": app_settings.cache_directory,
            },
        )

        app_settings.ensure_directories()

        channel_service = ChannelService(app_settings.channel_map_file)
        try:
            count = channel_service.load()
            logger.info(f"Loaded {count} channels", emoji=LogEmoji.SATELLITE)
        except ConfigurationError as e:
            logger.error(
                "Channel map could not be loaded, channel lookups will return nothing",
                exception=e,
            )

        pool = render_pool
        owns_pool = pool is None
        if pool is None:
            pool = RenderPool(
                max_workers=app_settings.render_workers,
                width=app_settings.thumbnail_width,
                quality=app_settings.thumbnail_quality,
            )
            pool.start()

        thumbnail_worker = ThumbnailWorker(
            render_pool=pool,
            dispatch_rate_limit=app_settings.dispatch_rate_limit,
            dispatch_window_seconds=app_settings.dispatch_window_seconds,
        )
        directory_indexer = DirectoryIndexer(app_settings.source_path)
        thumbnail_cache_service = ThumbnailCacheService(
            app_settings.source_path, app_settings.cache_path, thumbnail_worker
        )
        reconciliation_service = ReconciliationService(
            directory_indexer,
            thumbnail_cache_service,
            app_settings.cache_path,
            app_settings.image_extension_set,
        )
        scheduler_worker = SchedulerWorker(
            reconciliation_service,
            channel_service,
            reconcile_interval_seconds=app_settings.reconcile_interval_seconds,
            channel_reload_interval_seconds=app_settings.channel_reload_interval_seconds,
            reconcile_on_startup=app_settings.reconcile_on_startup,
        )

        _app.state.settings = app_settings
        _app.state.channel_service = channel_service
        _app.state.directory_indexer = directory_indexer
        _app.state.thumbnail_worker = thumbnail_worker
        _app.state.thumbnail_cache_service = thumbnail_cache_service
        _app.state.reconciliation_service = reconciliation_service
        _app.state.scheduler_worker = scheduler_worker

        await thumbnail_worker.start()
        await scheduler_worker.start()

        yield

        logger.info(
            "Shutting down GOES browser",
            emoji=LogEmoji.SHUTDOWN,
            extra_context={"operation": "application_shutdown"},
        )
        await scheduler_worker.stop()
        await thumbnail_worker.stop()
        if owns_pool:
            pool.shutdown()

    app = FastAPI(
        title="GOES Imagery Browser API",
        description="Browse satellite imagery and serve cached thumbnails",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.include_router(browse.router, prefix="/api", tags=["browse"])
    app.include_router(thumbnails.router, prefix="/api", tags=["thumbnails"])
    app.include_router(channels.router, prefix="/api", tags=["channels"])
    app.include_router(health.router, prefix="/api", tags=["health"])

    # Mounted last so it never shadows /api
    if app_settings.static_path.is_dir():
        app.mount(
            "/",
            StaticFiles(directory=app_settings.static_path, html=True),
            name="static",
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "goes_browser.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.value.lower(),
    )
