"""
Rounded-corner mask filter.

Cosmetic filter clearing the four corners of a bitmap outside a circle of the
given radius. The circle is drawn on a stencil ``rate`` times larger than the
radius and scaled back down, which anti-aliases the edge.
"""

import logging
import math

import numpy as np

from imgderive.core.constants import GeometryConstants, RoundedConstants
from imgderive.core.image.converters import ensure_rgba
from imgderive.core.image.processors import copy_resampled, new_canvas
from imgderive.core.rounding import round_half_away
from imgderive.schemas.common import Rect

logger = logging.getLogger(__name__)


def round_corners(
    bitmap: np.ndarray,
    radius: int = RoundedConstants.DEFAULT_RADIUS,
    rate: int = RoundedConstants.DEFAULT_RATE,
) -> np.ndarray:
    """
    Return a copy of bitmap with transparent rounded corners.

    Args:
        bitmap: Source RGBA bitmap (not modified)
        radius: Corner radius in pixels, clamped to the bitmap size
        rate: Stencil oversampling factor

    Returns:
        New RGBA bitmap
    """
    result = ensure_rgba(bitmap).copy()
    height, width = result.shape[:2]

    radius = min(radius, width, height)
    if radius <= 0 or rate <= 0:
        return result

    rs_radius = radius * rate
    rs_size = rs_radius * 2

    corner = new_canvas(rs_size, rs_size)

    # (stencil x, stencil y, bitmap x, bitmap y) per corner, clockwise from top-left
    positions = [
        (0, 0, 0, 0),
        (rs_radius, 0, width - radius, 0),
        (rs_radius, rs_radius, width - radius, height - radius),
        (0, rs_radius, 0, height - radius),
    ]

    for sx, sy, bx, by in positions:
        copy_resampled(
            corner,
            result,
            Rect(x=sx, y=sy, width=rs_radius, height=rs_radius),
            Rect(x=bx, y=by, width=radius, height=radius),
        )

    transparent = GeometryConstants.TRANSPARENT
    r_2 = rs_radius * rs_radius

    for i in range(-rs_radius, rs_radius + 1):
        x = round_half_away(math.sqrt(r_2 - i * i)) + rs_radius
        y = i + rs_radius
        if y >= rs_size:
            continue

        corner[y, x:] = transparent
        corner[y, : rs_size - x + 1] = transparent

    for sx, sy, bx, by in positions:
        copy_resampled(
            result,
            corner,
            Rect(x=bx, y=by, width=radius, height=radius),
            Rect(x=sx, y=sy, width=rs_radius, height=rs_radius),
        )

    logger.debug(f"Rounded corners of {width}x{height} bitmap with radius {radius}")
    return result
