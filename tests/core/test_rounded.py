"""
Unit tests for the rounded-corner filter
"""

import numpy as np

from imgderive.core.rounded import round_corners

RED = [255, 0, 0, 255]


class TestRoundCorners:
    """Test corner masking"""

    def test_corners_become_transparent(self, red_bitmap):
        """Test all four outermost corner pixels are cleared"""
        result = round_corners(red_bitmap, radius=8)

        for y, x in ((0, 0), (0, 99), (49, 0), (49, 99)):
            assert result[y, x, 3] == 0

    def test_inside_circle_untouched(self, red_bitmap):
        """Test pixels inside the corner circle keep their color"""
        result = round_corners(red_bitmap, radius=8)

        assert result[7, 7].tolist() == RED
        assert result[42, 92].tolist() == RED

    def test_edges_and_center_untouched(self, red_bitmap):
        """Test pixels outside the corner squares are never modified"""
        result = round_corners(red_bitmap, radius=8)

        assert result[0, 50].tolist() == RED
        assert result[25, 0].tolist() == RED
        assert result[25, 50].tolist() == RED

    def test_input_not_modified(self, red_bitmap):
        """Test the filter returns a new bitmap"""
        original = red_bitmap.copy()
        result = round_corners(red_bitmap)

        assert result is not red_bitmap
        assert np.array_equal(red_bitmap, original)

    def test_radius_clamped_to_size(self):
        """Test a radius larger than the bitmap is clamped"""
        bitmap = np.full((4, 6, 4), 255, dtype=np.uint8)
        result = round_corners(bitmap, radius=50, rate=4)

        assert result.shape == (4, 6, 4)
        assert result[3, 0, 3] == 0

    def test_zero_radius_is_copy(self, red_bitmap):
        """Test radius 0 leaves the bitmap unchanged"""
        assert np.array_equal(round_corners(red_bitmap, radius=0), red_bitmap)
