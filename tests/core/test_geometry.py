"""
Unit tests for the geometry engine
"""

import pytest

from imgderive.core.enums import Axis, CutAnchor
from imgderive.core.exceptions import AllocationError
from imgderive.core.geometry import (
    anchor_offset,
    canvas_size,
    plan_adapt,
    plan_fit,
    plan_reduce,
    plan_resample,
    plan_resize,
    plan_resize_rotate,
    plan_thumb,
    round_half_away,
)
from imgderive.schemas.common import Dimensions, Rect


def size(width, height):
    return Dimensions(width=width, height=height)


class TestRounding:
    """Test round-half-away-from-zero"""

    def test_halves_round_away_from_zero(self):
        """Test .5 rounds up for positives and down for negatives"""
        assert round_half_away(0.5) == 1
        assert round_half_away(2.5) == 3
        assert round_half_away(-2.5) == -3

    def test_non_halves(self):
        """Test ordinary rounding"""
        assert round_half_away(0.4975) == 0
        assert round_half_away(25.37) == 25
        assert round_half_away(-1.2) == -1


class TestAnchorOffset:
    """Test crop anchor offsets"""

    def test_start_edge(self):
        """Test Top and Left keep the start of the axis"""
        assert anchor_offset(CutAnchor.TOP, 100, Axis.VERTICAL) == 0
        assert anchor_offset(CutAnchor.LEFT, 100, Axis.HORIZONTAL) == 0

    def test_end_edge(self):
        """Test Bottom and Right keep the end of the axis"""
        assert anchor_offset(CutAnchor.BOTTOM, 100, Axis.VERTICAL) == 100
        assert anchor_offset(CutAnchor.RIGHT, 100, Axis.HORIZONTAL) == 100

    def test_other_axis_anchor_centers(self):
        """Test an anchor for the other axis falls back to centering"""
        assert anchor_offset(CutAnchor.LEFT, 100, Axis.VERTICAL) == 50
        assert anchor_offset(CutAnchor.BOTTOM, 100, Axis.HORIZONTAL) == 50

    def test_center_rounds_half_away(self):
        """Test odd overflow centers with half-away rounding"""
        assert anchor_offset(CutAnchor.CENTER, 25, Axis.VERTICAL) == 13


class TestResizePlans:
    """Test resample, resize, reduce and fit"""

    def test_canvas_size_rejects_non_positive(self):
        """Test zero or negative canvas sides raise AllocationError"""
        with pytest.raises(AllocationError):
            canvas_size(0, 10)
        with pytest.raises(AllocationError):
            canvas_size(10, -1)

    def test_resample_ignores_aspect(self):
        """Test resample maps the full source onto the full canvas"""
        plan = plan_resample(size(400, 200), 50, 70)
        assert plan.canvas == size(50, 70)
        assert plan.src == Rect(width=400, height=200)
        assert plan.dst == Rect(width=50, height=70)

    def test_resize_preserves_aspect(self):
        """Test resize derives height from the scale factor"""
        assert plan_resize(size(400, 300), 200).canvas == size(200, 150)
        assert plan_resize(size(333, 100), 100).canvas == size(100, 30)

    def test_resize_upscales(self):
        """Test resize also enlarges"""
        assert plan_resize(size(100, 50), 300).canvas == size(300, 150)

    def test_reduce_never_upscales(self):
        """Test reduce returns no plan for sources within width"""
        assert plan_reduce(size(100, 50), 200) is None
        assert plan_reduce(size(100, 50), 100) is None
        assert plan_reduce(size(100, 50), 50).canvas == size(50, 25)

    def test_fit_within_box_is_identity(self):
        """Test fit returns no plan when the source fits"""
        assert plan_fit(size(100, 50), 100, 50) is None
        assert plan_fit(size(100, 50), 300, 300) is None

    def test_fit_limits_by_tighter_axis(self):
        """Test fit scales to the limiting side"""
        assert plan_fit(size(400, 200), 100, 100).canvas == size(100, 50)
        assert plan_fit(size(200, 400), 100, 100).canvas == size(50, 100)

    def test_fit_without_height_reduces(self):
        """Test fit with height 0 behaves like reduce"""
        assert plan_fit(size(400, 200), 100).canvas == size(100, 50)
        assert plan_fit(size(50, 20), 100) is None


class TestThumbPlan:
    """Test letterboxing"""

    def test_canvas_is_exact(self):
        """Test thumb canvas always matches the requested box"""
        for source in (size(400, 200), size(200, 400), size(10, 10), size(300, 200)):
            assert plan_thumb(source, 300, 200).canvas == size(300, 200)

    def test_small_source_centered_with_bias(self):
        """Test unscaled centering uses the 2.01 divisor"""
        plan = plan_thumb(size(100, 50), 101, 101)

        # Dividing by 2 would give (1, 26)
        assert plan.dst == Rect(x=0, y=25, width=100, height=50)
        assert plan.src == Rect(width=100, height=50)

    def test_small_source_bias_on_both_axes(self):
        """Test both axes use the biased divisor"""
        plan = plan_thumb(size(10, 10), 31, 11)
        assert (plan.dst.x, plan.dst.y) == (10, 0)

    def test_square_source_in_wide_box_uses_bias(self):
        """Test a square source filling the height is offset by round(100 / 2.01)"""
        plan = plan_thumb(size(100, 100), 200, 100)
        assert plan.dst == Rect(x=50, y=0, width=100, height=100)

    def test_wider_source_letterboxed_vertically(self):
        """Test a wider source fills the width and is centered vertically"""
        plan = plan_thumb(size(400, 200), 300, 200)
        assert plan.dst == Rect(x=0, y=25, width=300, height=150)

    def test_taller_source_pillarboxed(self):
        """Test a taller source fills the height and is centered horizontally"""
        plan = plan_thumb(size(200, 400), 300, 200)
        assert plan.dst == Rect(x=100, y=0, width=100, height=200)

    def test_same_aspect_fills_canvas(self):
        """Test equal aspect scales directly"""
        plan = plan_thumb(size(600, 400), 300, 200)
        assert plan.dst == Rect(width=300, height=200)

    def test_zero_box_raises(self):
        """Test an empty box cannot be allocated"""
        with pytest.raises(AllocationError):
            plan_thumb(size(100, 50), 0, 10)


class TestAdaptPlan:
    """Test crop-to-fill"""

    def test_canvas_is_exact(self):
        """Test adapt canvas always matches the requested box"""
        for source in (size(400, 200), size(200, 400), size(10, 10), size(400, 100)):
            assert plan_adapt(source, 300, 200).canvas == size(300, 200)

    def test_small_source_centered_with_bias(self):
        """Test a source smaller on both axes is centered unscaled"""
        plan = plan_adapt(size(100, 50), 101, 101)
        assert plan.dst == Rect(x=0, y=25, width=100, height=50)

    def test_target_wider_crops_height(self):
        """Test a narrower source is centered horizontally and cropped vertically"""
        plan = plan_adapt(size(200, 400), 300, 200)
        assert plan.dst == Rect(x=50, y=0, width=200, height=200)
        assert plan.src == Rect(x=0, y=100, width=200, height=200)

    def test_target_wider_anchors(self):
        """Test Top and Bottom select the kept band"""
        assert plan_adapt(size(200, 400), 300, 200, CutAnchor.TOP).src.y == 0
        assert plan_adapt(size(200, 400), 300, 200, CutAnchor.BOTTOM).src.y == 200

    def test_target_taller_crops_width(self):
        """Test a shorter source is centered vertically and cropped horizontally"""
        plan = plan_adapt(size(400, 100), 300, 200)
        assert plan.dst == Rect(x=0, y=50, width=300, height=100)
        assert plan.src == Rect(x=50, y=0, width=300, height=100)

    def test_wider_aspect_crops_source_height(self):
        """Test a target wider in aspect keeps a horizontal band of the source"""
        plan = plan_adapt(size(300, 600), 150, 100)
        assert plan.dst == Rect(width=150, height=100)
        assert plan.src == Rect(x=0, y=200, width=300, height=200)
        assert plan_adapt(size(300, 600), 150, 100, CutAnchor.TOP).src.y == 0
        assert plan_adapt(size(300, 600), 150, 100, CutAnchor.BOTTOM).src.y == 400

    def test_narrower_aspect_crops_source_width(self):
        """Test a target narrower in aspect keeps a vertical band of the source"""
        plan = plan_adapt(size(400, 200), 300, 200)
        assert plan.dst == Rect(width=300, height=200)
        assert plan.src == Rect(x=50, y=0, width=300, height=200)
        assert plan_adapt(size(400, 200), 300, 200, CutAnchor.LEFT).src.x == 0
        assert plan_adapt(size(400, 200), 300, 200, CutAnchor.RIGHT).src.x == 100

    def test_same_aspect_scales_whole_source(self):
        """Test equal aspect uses the full source"""
        plan = plan_adapt(size(600, 400), 300, 200)
        assert plan.src == Rect(width=600, height=400)
        assert plan.dst == Rect(width=300, height=200)


class TestResizeRotatePlan:
    """Test portrait normalization"""

    def test_portrait_rotates(self):
        """Test portrait sources are rotated before resizing"""
        rotate, plan = plan_resize_rotate(size(100, 200), 50)
        assert rotate is True
        assert plan.canvas == size(50, 25)

    def test_landscape_does_not_rotate(self):
        """Test landscape sources are only resized"""
        rotate, plan = plan_resize_rotate(size(200, 100), 50)
        assert rotate is False
        assert plan.canvas == size(50, 25)

    def test_threshold(self):
        """Test a looser threshold leaves mildly portrait sources alone"""
        rotate, _ = plan_resize_rotate(size(100, 120), 50, threshold=1.5)
        assert rotate is False
