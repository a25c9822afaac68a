"""
API Routers for imgderive
"""

from . import derive, system

__all__ = ["derive", "system"]
