"""
Image utilities - modular architecture.

This package provides focused raster utilities:
- converters: Representation conversions (PIL, NumPy RGBA bitmaps)
- processors: Raster operations (canvas, resampled copy, rotation)
- codecs: Per-format decode/encode selected by type tag
"""

from imgderive.core.image.codecs import CODECS, Codec, build_codecs, codec_for, read_source_info
from imgderive.core.image.converters import ImageConverters
from imgderive.core.image.processors import (
    copy_resampled,
    execute_plan,
    new_canvas,
    rotate,
)

__all__ = [
    "CODECS",
    "Codec",
    "ImageConverters",
    "build_codecs",
    "codec_for",
    "copy_resampled",
    "execute_plan",
    "new_canvas",
    "read_source_info",
    "rotate",
]
