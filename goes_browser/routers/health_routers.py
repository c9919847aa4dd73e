# goes_browser/routers/health_routers.py
"""
Health and operations HTTP endpoints.

Role: Report queue and reconciliation state; trigger an out-of-band scan
Interactions: Reads ThumbnailWorker statistics and ReconciliationService
             status; POST /reconcile is the operator retry path for failed
             background renders
"""

import asyncio
from typing import Any, Dict

from fastapi import APIRouter, status

from ..dependencies import ReconciliationServiceDep, ThumbnailWorkerDep
from ..enums import LogEmoji, LoggerName, LogSource
from ..models.reconciliation_model import ReconciliationStatus
from ..services.logger import get_service_logger
from ..utils.router_helpers import handle_exceptions

logger = get_service_logger(LoggerName.API, LogSource.API)

router = APIRouter(tags=["health"])

# Strong references to scans started from the API
_background_scans = set()


@router.get("/health", response_model=Dict[str, Any])
@handle_exceptions("health check")
async def health_check(
    thumbnail_worker: ThumbnailWorkerDep,
    reconciliation_service: ReconciliationServiceDep,
) -> Dict[str, Any]:
    """
    Worker queue statistics and reconciliation progress.
    """
    worker_stats = thumbnail_worker.get_statistics()
    return {
        "status": "healthy" if thumbnail_worker.is_healthy() else "degraded",
        "thumbnail_worker": worker_stats.model_dump(),
        "reconciliation": reconciliation_service.status.model_dump(mode="json"),
    }


@router.post(
    "/reconcile",
    response_model=ReconciliationStatus,
    status_code=status.HTTP_202_ACCEPTED,
)
@handle_exceptions("trigger reconciliation")
async def trigger_reconciliation(
    reconciliation_service: ReconciliationServiceDep,
) -> ReconciliationStatus:
    """
    Start a reconciliation scan in the background.

    Returns the status right after the request; a scan already in progress
    is not started twice.
    """
    if not reconciliation_service.is_active:
        logger.info("Reconciliation requested via API", emoji=LogEmoji.SEARCH)
        task = asyncio.create_task(reconciliation_service.scan())
        _background_scans.add(task)
        task.add_done_callback(_background_scans.discard)
        # Let the scan mark itself active before reporting
        await asyncio.sleep(0)

    return reconciliation_service.status
