"""
Schemas Package

Pydantic schemas for data validation and serialization, shared by the core
geometry engine, the services and the HTTP API.
"""

# Common models (core data structures)
from .common import AspectRatio, Dimensions, Rect, SourceInfo

# Derivation API models
from .derive import (
    CropRequest,
    DerivedArtifactResponse,
    FormatRequest,
    ProbeResponse,
    ThumbnailRequest,
    ViewRequest,
)

# System models
from .system import SystemStatus

__all__ = [
    "AspectRatio",
    "Dimensions",
    "Rect",
    "SourceInfo",
    "CropRequest",
    "DerivedArtifactResponse",
    "FormatRequest",
    "ProbeResponse",
    "ThumbnailRequest",
    "ViewRequest",
    "SystemStatus",
]
