"""
Image processing operations.

Raster primitives that execute geometry plans:
- Canvas allocation
- Resampled copy between rectangles (smooth or sharp)
- Rotation
"""

import logging
import math
from typing import Optional, Tuple

import cv2
import numpy as np

from imgderive.core.constants import GeometryConstants
from imgderive.core.exceptions import AllocationError
from imgderive.core.geometry import TransformPlan
from imgderive.schemas.common import Rect

logger = logging.getLogger(__name__)

Color = Tuple[int, int, int, int]


def new_canvas(
    width: int, height: int, background: Color = GeometryConstants.TRANSPARENT
) -> np.ndarray:
    """
    Allocate an RGBA canvas filled with background.

    Args:
        width: Canvas width
        height: Canvas height
        background: RGBA fill

    Returns:
        NumPy uint8 array of shape (height, width, 4)

    Raises:
        AllocationError: If the size is not positive or memory is exhausted
    """
    if width <= 0 or height <= 0:
        raise AllocationError(f"Cannot allocate {width}x{height} canvas")

    try:
        canvas = np.empty((height, width, GeometryConstants.CHANNELS), dtype=np.uint8)
    except (MemoryError, ValueError) as e:
        raise AllocationError(f"Cannot allocate {width}x{height} canvas: {e}") from e

    canvas[:, :] = background
    return canvas


def copy_resampled(
    dst: np.ndarray, src: np.ndarray, dst_rect: Rect, src_rect: Rect, sharp: bool = False
) -> None:
    """
    Scale a source sub-rectangle into a destination rectangle.

    Writes into dst, which must be a canvas owned by the caller. Parts of the
    destination rectangle outside the canvas are clipped.

    Args:
        dst: Destination canvas
        src: Source bitmap (not modified)
        dst_rect: Where to write
        src_rect: What to read
        sharp: Nearest-neighbour instead of area averaging
    """
    if dst_rect.is_empty or src_rect.is_empty:
        return

    patch = src[src_rect.y : src_rect.y2, src_rect.x : src_rect.x2]
    if patch.shape[0] == 0 or patch.shape[1] == 0:
        logger.warning(f"Source rectangle {src_rect} is outside the bitmap")
        return

    if patch.shape[1] != dst_rect.width or patch.shape[0] != dst_rect.height:
        interpolation = cv2.INTER_NEAREST if sharp else cv2.INTER_AREA
        patch = cv2.resize(
            np.ascontiguousarray(patch),
            (dst_rect.width, dst_rect.height),
            interpolation=interpolation,
        )

    canvas_h, canvas_w = dst.shape[:2]
    h = min(dst_rect.height, canvas_h - dst_rect.y)
    w = min(dst_rect.width, canvas_w - dst_rect.x)
    if h <= 0 or w <= 0:
        return

    dst[dst_rect.y : dst_rect.y + h, dst_rect.x : dst_rect.x + w] = patch[:h, :w]


def execute_plan(
    bitmap: np.ndarray,
    plan: Optional[TransformPlan],
    sharp: bool = False,
    background: Color = GeometryConstants.TRANSPARENT,
) -> np.ndarray:
    """
    Run a geometry plan against a bitmap.

    Args:
        bitmap: Source bitmap
        plan: Plan from core.geometry, or None for pass-through
        sharp: Use nearest-neighbour sampling
        background: Fill for any padding

    Returns:
        New bitmap (a copy when plan is None)
    """
    if plan is None:
        return bitmap.copy()

    canvas = new_canvas(plan.canvas.width, plan.canvas.height, background)
    copy_resampled(canvas, bitmap, plan.dst, plan.src, sharp=sharp)
    return canvas


def rotate(
    bitmap: np.ndarray,
    degrees: float,
    background: Color = GeometryConstants.ROTATE_BACKGROUND,
) -> np.ndarray:
    """
    Rotate counter-clockwise, growing the canvas to bound the result.

    Multiples of 90 degrees are exact pixel permutations.

    Args:
        bitmap: Source bitmap
        degrees: Angle, counter-clockwise
        background: RGBA fill for uncovered corners

    Returns:
        Rotated bitmap
    """
    if float(degrees) % 90 == 0:
        quarter_turns = int(float(degrees) // 90) % 4
        return np.ascontiguousarray(np.rot90(bitmap, k=quarter_turns))

    height, width = bitmap.shape[:2]
    center = (width / 2, height / 2)
    matrix = cv2.getRotationMatrix2D(center, degrees, 1.0)

    cos = abs(matrix[0, 0])
    sin = abs(matrix[0, 1])
    new_width = int(math.ceil(height * sin + width * cos))
    new_height = int(math.ceil(height * cos + width * sin))

    matrix[0, 2] += new_width / 2 - center[0]
    matrix[1, 2] += new_height / 2 - center[1]

    if new_width <= 0 or new_height <= 0:
        raise AllocationError(f"Rotation produced empty canvas {new_width}x{new_height}")

    return cv2.warpAffine(
        bitmap,
        matrix,
        (new_width, new_height),
        flags=cv2.INTER_LINEAR,
        borderMode=cv2.BORDER_CONSTANT,
        borderValue=tuple(int(c) for c in background),
    )
