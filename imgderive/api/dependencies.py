"""
Shared FastAPI dependencies for the imgderive API.
"""

import logging
import os
import posixpath
from typing import Any, Dict

from fastapi import HTTPException, Request

from imgderive.api.exceptions import InvalidPathException
from imgderive.services.derivative_service import DerivativeService

logger = logging.getLogger(__name__)


def get_service(request: Request) -> DerivativeService:
    """
    Get the derivative service from app state.

    Raises:
        HTTPException: If the service is not initialized
    """
    try:
        return request.app.state.service
    except AttributeError as e:
        logger.error(f"Service not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Service not initialized"
        )


def get_config(request: Request) -> Dict[str, Any]:
    """Get application configuration (empty when not set)."""
    try:
        return request.app.state.config
    except AttributeError:
        logger.warning("Config not found in app state, using defaults")
        return {}


def get_prefix(request: Request) -> str:
    """
    Filesystem prefix for request paths: the document root with a trailing
    separator.
    """
    try:
        root = request.app.state.document_root
    except AttributeError:
        logger.error("Document root not initialized in app state")
        raise HTTPException(
            status_code=500, detail="Internal server error: Document root not initialized"
        )
    return os.path.join(root, "")


def validate_path(path: str) -> str:
    """
    Validate a path relative to the document root.

    Returns:
        The path unchanged

    Raises:
        InvalidPathException: If the path is empty, absolute, or climbs out
            of the document root
    """
    if not path or "\x00" in path or "\\" in path:
        raise InvalidPathException(path)

    if path.startswith("/"):
        raise InvalidPathException(path)

    normalized = posixpath.normpath(path)
    if normalized == ".." or normalized.startswith("../"):
        raise InvalidPathException(path)

    return path
