"""
Services Package

Business logic layer for derived image artifacts.
"""

from .derivative_service import DerivativeService

__all__ = ["DerivativeService"]
