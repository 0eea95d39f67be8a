"""
Fixed-precision comparison for chapter numbers.
"""

from __future__ import annotations

import math

CHAPTER_PRECISION = 1


def precision_round(value: float, precision: int) -> float:
    """
    Round to the nearest multiple of 10**-precision, ties away from zero.
    """

    factor = 10**precision
    scaled = value * factor
    rounded = math.floor(abs(scaled) + 0.5)
    return math.copysign(rounded, scaled) / factor


def precision_equals(a: float, b: float, precision: int = CHAPTER_PRECISION) -> bool:
    return precision_round(a, precision) == precision_round(b, precision)
