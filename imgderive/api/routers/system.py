"""
System API Router - Status and configuration
"""

import logging
import time
from datetime import datetime

import psutil
from fastapi import APIRouter, Request

from imgderive.api.exceptions import safe_endpoint
from imgderive.schemas import SystemStatus

logger = logging.getLogger(__name__)

router = APIRouter()

# Track start time
START_TIME = time.time()


@router.get("/status")
@safe_endpoint
def get_status(request: Request) -> SystemStatus:
    """Get service status"""
    memory_info = psutil.Process().memory_info()
    virtual_memory = psutil.virtual_memory()

    config = getattr(request.app.state, "config", {})

    return SystemStatus(
        status="healthy",
        uptime=time.time() - START_TIME,
        memory_usage={
            "process_mb": memory_info.rss / 1024 / 1024,
            "system_percent": virtual_memory.percent,
            "available_mb": virtual_memory.available / 1024 / 1024,
        },
        document_root=getattr(request.app.state, "document_root", ""),
        environment=config.get("environment", "unknown"),
    )


@router.get("/config")
@safe_endpoint
def get_config(request: Request) -> dict:
    """Get current configuration"""
    return getattr(request.app.state, "config", {})


@router.get("/health")
def health_check() -> dict:
    """Simple health check"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}
