"""
Enumerations shared across the geometry engine, orchestrator and API.
"""

from enum import Enum, IntEnum


class CutAnchor(str, Enum):
    """Edge kept when cropping removes overflow."""

    TOP = "top"
    BOTTOM = "bottom"
    LEFT = "left"
    RIGHT = "right"
    CENTER = "center"


class Axis(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class ImageType(str, Enum):
    """Supported image type tags (values are Pillow format names)."""

    JPEG = "JPEG"
    PNG = "PNG"
    GIF = "GIF"
    BMP = "BMP"


class TransformCase(IntEnum):
    """
    Result of classifying a format request.

    Values are stable numeric codes: 0 means nothing to do, 1 means the
    source is not a usable image, 2-15 name the transform that applies.
    """

    UNCHANGED = 0
    INVALID = 1
    EXCEEDS_WIDTH = 2
    EXCEEDS_HEIGHT = 3
    EXCEEDS_BOX = 4
    RATIO_MATCH_EXCEEDS_WIDTH = 5
    RATIO_MATCH_EXCEEDS_HEIGHT = 6
    RATIO_MATCH_EXCEEDS_BOX = 7
    WIDER_CROP_TO_RATIO = 8
    NARROWER_CROP_TO_RATIO = 9
    WIDER_EXCEEDS_WIDTH = 10
    WIDER_EXCEEDS_HEIGHT = 11
    WIDER_EXCEEDS_BOX = 12
    NARROWER_EXCEEDS_WIDTH = 13
    NARROWER_EXCEEDS_HEIGHT = 14
    NARROWER_EXCEEDS_BOX = 15


class FormatOperation(str, Enum):
    """Geometry entry point selected for a format request."""

    NONE = "none"
    RESAMPLE = "resample"
    ADAPT = "adapt"


class RenderOperation(str, Enum):
    """Operations available through the in-memory render endpoint."""

    REDUCE = "reduce"
    RESIZE = "resize"
    FIT = "fit"
    THUMB = "thumb"
    ADAPT = "adapt"
    ROTATE = "rotate"
    RESIZE_ROTATE = "resize_rotate"
    ROUNDED = "rounded"
