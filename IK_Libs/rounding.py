"""
Rounding helpers shared by the color, geometry and export code.

Python's built-in round() rounds halves to even; pixel and quality math
in ImageKit rounds halves away from zero instead.
"""

import math


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    if value < 0:
        return -int(math.floor(-value + 0.5))
    return int(math.floor(value + 0.5))


def clamp(value, low, high):
    """Clamp value into the closed range [low, high]."""
    return max(low, min(high, value))
