# goes_browser/dependencies.py
"""
Dependency injection for the routers.

Long-lived services are built once in the application lifespan and stored
on `app.state`; these providers hand them to endpoints.
"""

from typing import Annotated

from fastapi import Depends, Request

from .config import Settings
from .services.channel_service import ChannelService
from .services.directory_indexer import DirectoryIndexer
from .services.reconciliation_service import ReconciliationService
from .services.thumbnail_cache_service import ThumbnailCacheService
from .workers.thumbnail_worker import ThumbnailWorker


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_directory_indexer(request: Request) -> DirectoryIndexer:
    return request.app.state.directory_indexer


def get_thumbnail_cache_service(request: Request) -> ThumbnailCacheService:
    return request.app.state.thumbnail_cache_service


def get_thumbnail_worker(request: Request) -> ThumbnailWorker:
    return request.app.state.thumbnail_worker


def get_reconciliation_service(request: Request) -> ReconciliationService:
    return request.app.state.reconciliation_service


def get_channel_service(request: Request) -> ChannelService:
    return request.app.state.channel_service


SettingsDep = Annotated[Settings, Depends(get_settings)]
DirectoryIndexerDep = Annotated[DirectoryIndexer, Depends(get_directory_indexer)]
ThumbnailCacheServiceDep = Annotated[
    ThumbnailCacheService, Depends(get_thumbnail_cache_service)
]
ThumbnailWorkerDep = Annotated[ThumbnailWorker, Depends(get_thumbnail_worker)]
ReconciliationServiceDep = Annotated[
    ReconciliationService, Depends(get_reconciliation_service)
]
ChannelServiceDep = Annotated[ChannelService, Depends(get_channel_service)]
