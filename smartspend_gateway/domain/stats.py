"""Small numeric helpers shared by the engines"""

import math
from typing import Optional, Sequence


def round_half_up(value: float) -> int:
    """Round to nearest integer, .5 going up (builtin round() is banker's rounding)"""
    return math.floor(value + 0.5)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def median(values: Sequence[float]) -> float:
    if not values:
        return 0
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


def median_absolute_deviation(values: Sequence[float]) -> Optional[float]:
    """MAD around the median; None below 3 samples"""
    if len(values) < 3:
        return None
    center = median(values)
    return median([abs(v - center) for v in values])


def quantile(values: Sequence[float], q: float) -> float:
    """Quantile with linear interpolation between order statistics"""
    if not values:
        return 0
    ordered = sorted(values)
    pos = (len(ordered) - 1) * clamp(q, 0, 1)
    base = math.floor(pos)
    rest = pos - base
    if base + 1 >= len(ordered):
        return ordered[base]
    return ordered[base] + rest * (ordered[base + 1] - ordered[base])
