"""
System API models.
"""

from typing import Dict

from pydantic import BaseModel


class SystemStatus(BaseModel):
    """Service status"""

    status: str
    uptime: float
    memory_usage: Dict[str, float]
    document_root: str
    environment: str
