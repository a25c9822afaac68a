"""
Format Classifier - decides how an image must change to satisfy a format.

A format is an optional maximum width, an optional maximum height and an
optional width:height ratio. ``classify`` maps the current size of an image
onto one of the TransformCase values and computes the target dimensions of
the geometry operation that applies; ``plan_decision`` turns that into a
TransformPlan.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from imgderive.core.enums import CutAnchor, FormatOperation, TransformCase
from imgderive.core.geometry import TransformPlan, canvas_size, plan_adapt, plan_resample
from imgderive.core.rounding import round_half_away
from imgderive.schemas.common import AspectRatio, Dimensions

logger = logging.getLogger(__name__)

_WIDTH = "width"
_HEIGHT = "height"
_BOX = "box"

_UNCONSTRAINED_CASES = {
    _WIDTH: TransformCase.EXCEEDS_WIDTH,
    _HEIGHT: TransformCase.EXCEEDS_HEIGHT,
    _BOX: TransformCase.EXCEEDS_BOX,
}
_MATCHING_CASES = {
    _WIDTH: TransformCase.RATIO_MATCH_EXCEEDS_WIDTH,
    _HEIGHT: TransformCase.RATIO_MATCH_EXCEEDS_HEIGHT,
    _BOX: TransformCase.RATIO_MATCH_EXCEEDS_BOX,
}
_WIDER_CASES = {
    _WIDTH: TransformCase.WIDER_EXCEEDS_WIDTH,
    _HEIGHT: TransformCase.WIDER_EXCEEDS_HEIGHT,
    _BOX: TransformCase.WIDER_EXCEEDS_BOX,
}
_NARROWER_CASES = {
    _WIDTH: TransformCase.NARROWER_EXCEEDS_WIDTH,
    _HEIGHT: TransformCase.NARROWER_EXCEEDS_HEIGHT,
    _BOX: TransformCase.NARROWER_EXCEEDS_BOX,
}


@dataclass(frozen=True)
class FormatDecision:
    """Classification result for one format request."""

    case: TransformCase
    operation: FormatOperation = FormatOperation.NONE
    target: Optional[Dimensions] = None
    size: Optional[Dimensions] = None
    ratio: Optional[AspectRatio] = None

    @property
    def needs_transform(self) -> bool:
        return self.operation != FormatOperation.NONE


def _bound_mode(width: int, height: int) -> Optional[str]:
    """Which bounds the request constrains."""
    if width > 0 and height == 0:
        return _WIDTH
    if width == 0 and height > 0:
        return _HEIGHT
    if width > 0 and height > 0:
        return _BOX
    return None


def _exceeds(size: Dimensions, mode: Optional[str], width: int, height: int) -> bool:
    if mode == _WIDTH:
        return size.width > width
    if mode == _HEIGHT:
        return size.height > height
    if mode == _BOX:
        return size.width > width or size.height > height
    return False


def _classify_case(
    size: Dimensions, width: int, height: int, ratio: Optional[AspectRatio]
) -> TransformCase:
    mode = _bound_mode(width, height)
    exceeded = _exceeds(size, mode, width, height)

    if ratio is None:
        return _UNCONSTRAINED_CASES[mode] if exceeded else TransformCase.UNCHANGED

    if ratio.matches(size):
        return _MATCHING_CASES[mode] if exceeded else TransformCase.UNCHANGED

    if size.width * ratio.h > size.height * ratio.w:
        if mode is None:
            return TransformCase.WIDER_CROP_TO_RATIO
        return _WIDER_CASES[mode] if exceeded else TransformCase.UNCHANGED

    if mode is None:
        return TransformCase.NARROWER_CROP_TO_RATIO
    return _NARROWER_CASES[mode] if exceeded else TransformCase.UNCHANGED


def _target(
    case: TransformCase,
    size: Dimensions,
    width: int,
    height: int,
    ratio: Optional[AspectRatio],
) -> Dimensions:
    """Target dimensions for a transforming case."""
    iw, ih = size.width, size.height

    if case in (TransformCase.EXCEEDS_WIDTH, TransformCase.RATIO_MATCH_EXCEEDS_WIDTH):
        return canvas_size(width, round_half_away(width * ih / iw))

    if case in (TransformCase.EXCEEDS_HEIGHT, TransformCase.RATIO_MATCH_EXCEEDS_HEIGHT):
        return canvas_size(round_half_away(height * iw / ih), height)

    if case in (TransformCase.EXCEEDS_BOX, TransformCase.RATIO_MATCH_EXCEEDS_BOX):
        w = width / iw
        h = height / ih
        if w < h:
            return canvas_size(width, round_half_away(width * ih / iw))
        if w > h:
            return canvas_size(round_half_away(height * iw / ih), height)
        return canvas_size(width, height)

    if case == TransformCase.WIDER_CROP_TO_RATIO:
        return canvas_size(iw, round_half_away(iw * ratio.h / ratio.w))

    if case == TransformCase.NARROWER_CROP_TO_RATIO:
        return canvas_size(round_half_away(ih * ratio.w / ratio.h), ih)

    if case in (
        TransformCase.WIDER_EXCEEDS_WIDTH,
        TransformCase.NARROWER_EXCEEDS_WIDTH,
        TransformCase.NARROWER_EXCEEDS_BOX,
    ):
        return canvas_size(width, round_half_away(width * ratio.h / ratio.w))

    # WIDER_EXCEEDS_HEIGHT, WIDER_EXCEEDS_BOX, NARROWER_EXCEEDS_HEIGHT
    return canvas_size(round_half_away(height * ratio.w / ratio.h), height)


def classify(
    size: Optional[Dimensions],
    width: int = 0,
    height: int = 0,
    ratio: Union[AspectRatio, str, None] = None,
) -> FormatDecision:
    """
    Classify an image against a format.

    Args:
        size: Current natural size, None if the file is not a valid image
        width: Maximum width, 0 for unconstrained
        height: Maximum height, 0 for unconstrained
        ratio: Required width:height ratio, empty for unconstrained

    Returns:
        FormatDecision with case, operation and target dimensions

    Raises:
        InvalidRatioError: If ratio is a malformed string
        AllocationError: If the target would have a non-positive side
    """
    if isinstance(ratio, str):
        ratio = AspectRatio.parse_optional(ratio)

    if size is None:
        return FormatDecision(case=TransformCase.INVALID, ratio=ratio)

    case = _classify_case(size, width, height, ratio)
    if case == TransformCase.UNCHANGED:
        return FormatDecision(case=case, size=size, ratio=ratio)

    if case in (
        TransformCase.EXCEEDS_WIDTH,
        TransformCase.EXCEEDS_HEIGHT,
        TransformCase.EXCEEDS_BOX,
        TransformCase.RATIO_MATCH_EXCEEDS_WIDTH,
        TransformCase.RATIO_MATCH_EXCEEDS_HEIGHT,
        TransformCase.RATIO_MATCH_EXCEEDS_BOX,
    ):
        operation = FormatOperation.RESAMPLE
    else:
        operation = FormatOperation.ADAPT

    target = _target(case, size, width, height, ratio)
    logger.debug(
        f"Format case {case.name} for {size.width}x{size.height}: "
        f"{operation.value} to {target.width}x{target.height}"
    )

    return FormatDecision(case=case, operation=operation, target=target, size=size, ratio=ratio)


def plan_decision(
    decision: FormatDecision, anchor: CutAnchor = CutAnchor.CENTER
) -> Optional[TransformPlan]:
    """
    Build the geometry plan for a decision.

    Returns:
        TransformPlan, or None when no transform is needed
    """
    if not decision.needs_transform:
        return None

    if decision.operation == FormatOperation.RESAMPLE:
        return plan_resample(decision.size, decision.target.width, decision.target.height)

    return plan_adapt(decision.size, decision.target.width, decision.target.height, anchor)
