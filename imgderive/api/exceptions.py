"""
HTTP error handling for the imgderive API.

Routers raise the HTTPException subclasses below; DerivativeError subclasses
that escape a route are mapped to status codes by register_exception_handlers.
"""

import functools
import inspect
import logging
from typing import Dict, Type

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from imgderive.core.exceptions import (
    AllocationError,
    DerivativeError,
    EncodeError,
    InvalidRatioError,
    SourceNotFoundError,
    UnreadableImageError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)


class SourceNotFoundException(HTTPException):
    def __init__(self, path: str):
        super().__init__(status_code=404, detail=f"Source {path} not found")


class DerivationFailedException(HTTPException):
    def __init__(self, path: str, operation: str):
        super().__init__(status_code=422, detail=f"Could not {operation} {path}")


class InvalidPathException(HTTPException):
    def __init__(self, path: str):
        super().__init__(status_code=400, detail=f"Invalid path {path!r}")


ERROR_STATUS: Dict[Type[DerivativeError], int] = {
    SourceNotFoundError: 404,
    InvalidRatioError: 400,
    UnsupportedFormatError: 415,
    UnreadableImageError: 422,
    AllocationError: 422,
    EncodeError: 500,
}


def status_for(exc: DerivativeError) -> int:
    """HTTP status for a derivation error (500 for unknown subclasses)."""
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 500


def safe_endpoint(func):
    """
    Decorator for route handlers.

    HTTPException and DerivativeError pass through to FastAPI's handlers;
    anything else is logged and turned into a 500.
    """

    def _internal_error(e: Exception) -> HTTPException:
        logger.error(f"Unhandled error in {func.__name__}: {e}", exc_info=True)
        return HTTPException(status_code=500, detail=f"Internal server error: {e}")

    if inspect.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except (HTTPException, DerivativeError):
                raise
            except Exception as e:
                raise _internal_error(e) from e

        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (HTTPException, DerivativeError):
            raise
        except Exception as e:
            raise _internal_error(e) from e

    return wrapper


def register_exception_handlers(app: FastAPI) -> None:
    """Install handlers mapping DerivativeError subclasses to HTTP responses."""

    @app.exception_handler(DerivativeError)
    async def derivative_error_handler(request: Request, exc: DerivativeError):
        status = status_for(exc)
        logger.warning(f"{request.method} {request.url.path} -> {status}: {exc.message}")
        return JSONResponse(
            status_code=status,
            content={"detail": exc.message, "error": type(exc).__name__},
        )
