"""
Rounding used by every geometry computation.

Python's round() rounds half to even; derived sizes and offsets must round
half away from zero so that artifact names and pixels stay reproducible.
"""

import math


def round_half_away(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Example:
        >>> round_half_away(2.5)
        3
        >>> round_half_away(-2.5)
        -3
    """
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))
