"""
Core modules for imgderive: geometry engine, format classifier, naming,
file stores, codecs and the image handle.
"""

from .enums import CutAnchor, FormatOperation, ImageType, TransformCase
from .exceptions import (
    AllocationError,
    DerivativeError,
    EncodeError,
    InvalidRatioError,
    SourceNotFoundError,
    UnreadableImageError,
    UnsupportedFormatError,
)

__all__ = [
    "CutAnchor",
    "FormatOperation",
    "ImageType",
    "TransformCase",
    "DerivativeError",
    "SourceNotFoundError",
    "UnreadableImageError",
    "UnsupportedFormatError",
    "AllocationError",
    "EncodeError",
    "InvalidRatioError",
]
