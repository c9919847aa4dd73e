# goes_browser/utils/router_helpers.py
"""
Router Helper Functions

Common decorators for FastAPI routers: maps domain exceptions to HTTP
responses so endpoints can stay free of try/except blocks.
"""

from functools import wraps
from typing import Callable, Dict, Type

from fastapi import HTTPException, status

from ..enums import LoggerName, LogSource
from ..exceptions import (
    DirectoryUnavailableError,
    GenerationFailedError,
    GoesBrowserError,
    InvalidPathError,
    SourceNotFoundError,
)
from ..services.logger import get_service_logger

logger = get_service_logger(LoggerName.ROUTER, LogSource.API)

# Most specific first; the first isinstance match wins
EXCEPTION_STATUS_CODES: Dict[Type[GoesBrowserError], int] = {
    InvalidPathError: status.HTTP_400_BAD_REQUEST,
    SourceNotFoundError: status.HTTP_404_NOT_FOUND,
    DirectoryUnavailableError: status.HTTP_503_SERVICE_UNAVAILABLE,
    GenerationFailedError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(error: GoesBrowserError) -> int:
    for exception_type, status_code in EXCEPTION_STATUS_CODES.items():
        if isinstance(error, exception_type):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def handle_exceptions(operation_name: str):
    """
    Decorator for standardized exception handling in router endpoints.

    Domain errors become HTTPExceptions with their mapped status code;
    anything unexpected is logged and becomes a 500.

    Args:
        operation_name: Human-readable description of the operation for error messages

    Usage:
        @handle_exceptions("list directory")
        async def list_directory():
            ...
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except HTTPException:
                raise
            except GoesBrowserError as e:
                status_code = status_code_for(e)
                if status_code >= 500:
                    logger.error(
                        f"Error during {operation_name}: {e}",
                        error_context={"operation": operation_name},
                    )
                else:
                    logger.debug(f"Rejected {operation_name}: {e}")
                raise HTTPException(status_code=status_code, detail=str(e)) from e
            except Exception as e:
                logger.error(
                    f"Unexpected error during {operation_name}",
                    exception=e,
                    error_context={"operation": operation_name},
                )
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail=f"Failed to {operation_name}",
                ) from e

        return wrapper

    return decorator
