"""
Geometry engine.

Pure functions deciding, for a source size and a target constraint, the
canvas to allocate, the source sub-rectangle to read and the destination
rectangle to write. Plans are executed by ``core.image.processors``.

A function returning None instead of a plan means the source passes through
unchanged.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from imgderive.core.constants import GeometryConstants
from imgderive.core.enums import Axis, CutAnchor
from imgderive.core.exceptions import AllocationError
from imgderive.core.rounding import round_half_away
from imgderive.schemas.common import Dimensions, Rect

logger = logging.getLogger(__name__)

__all__ = [
    "TransformPlan",
    "round_half_away",
    "anchor_offset",
    "canvas_size",
    "plan_resample",
    "plan_resize",
    "plan_reduce",
    "plan_fit",
    "plan_thumb",
    "plan_adapt",
    "plan_resize_rotate",
]


@dataclass(frozen=True)
class TransformPlan:
    """Canvas size plus the source and destination rectangles of one copy."""

    canvas: Dimensions
    src: Rect
    dst: Rect


def canvas_size(width: int, height: int) -> Dimensions:
    """
    Validate a canvas size.

    Raises:
        AllocationError: If either side is not positive
    """
    if width <= 0 or height <= 0:
        raise AllocationError(f"Cannot allocate {width}x{height} canvas")
    return Dimensions(width=width, height=height)


def _center(box: int, content: int) -> int:
    """Offset of content centered in box, with the 2.01 bias."""
    return round_half_away((box - content) / GeometryConstants.CENTER_BIAS_DIVISOR)


def anchor_offset(anchor: CutAnchor, overflow: float, axis: Axis) -> int:
    """
    Offset into the source for a crop along one axis.

    Args:
        anchor: Requested anchor
        overflow: Source length minus the kept length on this axis
        axis: Axis being cropped

    Returns:
        0 for the start edge (Top/Left), the whole overflow for the end edge
        (Bottom/Right), otherwise the centered offset.
    """
    if axis == Axis.VERTICAL:
        start, end = CutAnchor.TOP, CutAnchor.BOTTOM
    else:
        start, end = CutAnchor.LEFT, CutAnchor.RIGHT

    if anchor == start:
        return 0
    if anchor == end:
        return round_half_away(overflow)
    return round_half_away(overflow / 2)


def plan_resample(size: Dimensions, width: int, height: int) -> TransformPlan:
    """Scale the whole source into a canvas of exactly (width, height)."""
    canvas = canvas_size(width, height)
    return TransformPlan(canvas=canvas, src=Rect.full(size), dst=Rect.full(canvas))


def plan_resize(size: Dimensions, width: int) -> TransformPlan:
    """Scale to the given width, preserving the source aspect ratio."""
    if width <= 0:
        raise AllocationError(f"Cannot resize to width {width}")

    height = round_half_away(size.height / (size.width / width))
    return plan_resample(size, width, height)


def plan_reduce(size: Dimensions, width: int) -> Optional[TransformPlan]:
    """Resize only when the source is wider than width; never upscale."""
    if size.width > width:
        return plan_resize(size, width)
    return None


def plan_fit(size: Dimensions, width: int, height: int = 0) -> Optional[TransformPlan]:
    """
    Fit inside a (width, height) box preserving aspect ratio, never upscaling.

    Args:
        size: Source size
        width: Box width
        height: Box height, 0 for width-only reduction

    Returns:
        Plan, or None when the source already fits
    """
    if height == 0:
        return plan_reduce(size, width)

    if width >= size.width and height >= size.height:
        return None

    if width <= 0 or height < 0:
        raise AllocationError(f"Cannot fit into {width}x{height}")

    w = size.width / width
    h = size.height / height

    if w > h:
        height = round_half_away(size.height / w)
    elif w < h:
        width = round_half_away(size.width / h)

    return plan_resample(size, width, height)


def plan_thumb(size: Dimensions, w: int, h: int) -> TransformPlan:
    """
    Letterbox the whole source into a canvas of exactly (w, h).

    A source smaller on both axes is centered unscaled; otherwise it is scaled
    to fill its limiting axis and centered on the other.
    """
    canvas = canvas_size(w, h)

    iw, ih = size.width, size.height
    wh = w / h
    iwh = iw / ih

    if w > iw and h > ih:
        nw, nh = iw, ih
        x = _center(w, iw)
        y = _center(h, ih)
    elif wh > iwh:
        nw = round_half_away(h * iwh)
        nh = h
        x = _center(w, nw)
        y = 0
    elif wh < iwh:
        nw = w
        nh = round_half_away(w / iwh)
        x = 0
        y = _center(h, nh)
    else:
        nw, nh = w, h
        x = y = 0

    return TransformPlan(
        canvas=canvas,
        src=Rect.full(size),
        dst=Rect(x=x, y=y, width=nw, height=nh),
    )


def plan_adapt(
    size: Dimensions, w: int, h: int, anchor: CutAnchor = CutAnchor.CENTER
) -> TransformPlan:
    """
    Fill a canvas of exactly (w, h), cropping overflow per anchor.

    Cases:
        1. source smaller on both axes: centered unscaled
        2. target wider only: centered horizontally, height cropped
        3. target taller only: centered vertically, width cropped
        4. target aspect wider: source height cropped to the target aspect
        5. target aspect narrower: source width cropped to the target aspect
        6. equal aspect: direct scale

    Args:
        size: Source size
        w: Canvas width
        h: Canvas height
        anchor: Edge to keep when cropping

    Returns:
        TransformPlan with the cropped source rectangle
    """
    canvas = canvas_size(w, h)

    iw, ih = size.width, size.height
    wh = w / h
    iwh = iw / ih

    if w > iw and h > ih:
        dst = Rect(x=_center(w, iw), y=_center(h, ih), width=iw, height=ih)
        src = Rect.full(size)
    elif w > iw:
        dst = Rect(x=round_half_away((w - iw) / 2), y=0, width=iw, height=h)
        src = Rect(x=0, y=anchor_offset(anchor, ih - h, Axis.VERTICAL), width=iw, height=h)
    elif h > ih:
        dst = Rect(x=0, y=round_half_away((h - ih) / 2), width=w, height=ih)
        src = Rect(x=anchor_offset(anchor, iw - w, Axis.HORIZONTAL), y=0, width=w, height=ih)
    elif wh > iwh:
        kept = iw * h / w
        dst = Rect.full(canvas)
        src = Rect(
            x=0,
            y=anchor_offset(anchor, ih - kept, Axis.VERTICAL),
            width=iw,
            height=round_half_away(kept),
        )
    elif wh < iwh:
        kept = ih * w / h
        dst = Rect.full(canvas)
        src = Rect(
            x=anchor_offset(anchor, iw - kept, Axis.HORIZONTAL),
            y=0,
            width=round_half_away(kept),
            height=ih,
        )
    else:
        dst = Rect.full(canvas)
        src = Rect.full(size)

    return TransformPlan(canvas=canvas, src=src, dst=dst)


def plan_resize_rotate(
    size: Dimensions, width: int, threshold: float = GeometryConstants.DEFAULT_ROTATE_THRESHOLD
) -> Tuple[bool, TransformPlan]:
    """
    Normalize portrait sources to landscape before resizing.

    Args:
        size: Source size before rotation
        width: Target width
        threshold: Rotate when height > width * threshold

    Returns:
        Tuple of (rotate 90 degrees first, resize plan for the rotated size)
    """
    rotate = size.height > size.width * threshold
    if rotate:
        size = Dimensions(width=size.height, height=size.width)
        logger.debug(f"Portrait source, rotating before resize to {width}")

    return rotate, plan_resize(size, width)
