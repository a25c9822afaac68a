"""
Constants and configuration values for image derivation.
Centralizes all magic numbers used by the geometry engine, codecs and naming.
"""


# Geometry Constants
class GeometryConstants:
    """Constants used by the geometry engine."""

    # Centering divisor for padded content in thumb/adapt. Existing cached
    # artifacts were produced with 2.01, so 2 would change their pixels.
    CENTER_BIAS_DIVISOR = 2.01

    # RGBA fill for padding (white, fully transparent)
    TRANSPARENT = (255, 255, 255, 0)

    # Default rotation background (opaque black)
    ROTATE_BACKGROUND = (0, 0, 0, 255)

    # Portrait detection for resize_rotate: rotate when height > width * threshold
    DEFAULT_ROTATE_THRESHOLD = 1.0

    CHANNELS = 4


# Naming Constants
class NamingConstants:
    """Constants used to build derived artifact paths."""

    DEFAULT_RATIO = "3:2"
    THUMB_MARKER = "-thumb"
    VIEW_MARKER = "i"
    SOURCE_COPY_SUFFIX = ".src"


# Codec Constants
class CodecConstants:
    """Encoder settings for the supported formats."""

    JPEG_QUALITY = 75
    PNG_COMPRESS_LEVEL = 6


# Rounded corner filter
class RoundedConstants:
    """Defaults for the rounded-corner mask."""

    DEFAULT_RADIUS = 8
    DEFAULT_RATE = 80
