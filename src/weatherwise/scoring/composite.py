"""
Shared scoring utilities.

This module contains small, reusable helpers used by both comfort scores:
- `round_half_up`: integer rounding where .5 always goes up (so 67.5 -> 68, -2.5 -> -2)
- `clamp`: keep values within a closed range for stable UI/output
- `weighted_blend`: combine 0..100 component scores with weights that sum to 1.0
"""

from __future__ import annotations

import math


def round_half_up(x: float) -> int:
    """Round to the nearest integer, ties toward +infinity."""
    return int(math.floor(float(x) + 0.5))


def round_to(x: float, digits: int) -> float:
    """Round to `digits` decimals with the same tie rule as `round_half_up`."""
    factor = 10**digits
    return round_half_up(float(x) * factor) / factor


def clamp(x: float, low: float, high: float) -> float:
    """Clamp a number into the [low, high] range."""
    return max(low, min(high, float(x)))


def weighted_blend(components: dict[str, float], weights: dict[str, float]) -> float:
    """Weighted sum of named components; missing weights count as zero."""
    return sum(float(weights.get(name, 0.0)) * float(value) for name, value in components.items())
