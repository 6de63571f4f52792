"""Per-pixel numeric helpers shared by every enhancement executor.

The helpers operate on a flat RGBA snapshot (``float64``) so neighbour reads
never observe values already rewritten by the stage that is running.  They are
JIT-compiled with Numba and remain callable from plain Python, which keeps the
unit tests free of any executor plumbing.
"""

from __future__ import annotations

import math

import numpy as np
from numba import jit

CONTRAST_CENTER = 128.0


@jit(nopython=True, cache=True)
def clamp_channel(value: float) -> int:
    """Round *value* half-up and clamp the result into ``[0, 255]``."""

    # Range check on the float; huge values would overflow the int64 floor.
    if value >= 254.5:
        return 255
    if value >= 0.5:
        return math.floor(value + 0.5)
    return 0


@jit(nopython=True, cache=True)
def box_blur_estimate(
    original: np.ndarray,
    width: int,
    x: int,
    y: int,
    radius: int,
) -> tuple[float, float, float]:
    """Average R, G and B over the ``(2 * radius + 1)²`` window around ``(x, y)``."""

    sum_r = 0.0
    sum_g = 0.0
    sum_b = 0.0
    count = 0
    for dy in range(-radius, radius + 1):
        row = (y + dy) * width
        for dx in range(-radius, radius + 1):
            offset = (row + x + dx) * 4
            sum_r += original[offset]
            sum_g += original[offset + 1]
            sum_b += original[offset + 2]
            count += 1
    return sum_r / count, sum_g / count, sum_b / count


@jit(nopython=True, cache=True)
def range_weighted_average(
    original: np.ndarray,
    width: int,
    x: int,
    y: int,
    radius: int,
    threshold: float,
) -> tuple[float, float, float, float]:
    """Return the colour-similarity weighted average around ``(x, y)``.

    Neighbours closer than ``threshold`` in RGB space weigh 1, the rest decay
    with ``exp(-distance / threshold)``.  There is no spatial term, so strong
    colour edges survive while flat areas are smoothed.  The fourth element is
    the accumulated weight; the centre pixel alone contributes 1 to it.
    """

    center = (y * width + x) * 4
    center_r = original[center]
    center_g = original[center + 1]
    center_b = original[center + 2]

    sum_r = 0.0
    sum_g = 0.0
    sum_b = 0.0
    weight_sum = 0.0
    for dy in range(-radius, radius + 1):
        row = (y + dy) * width
        for dx in range(-radius, radius + 1):
            offset = (row + x + dx) * 4
            n_r = original[offset]
            n_g = original[offset + 1]
            n_b = original[offset + 2]
            distance = math.sqrt(
                (n_r - center_r) ** 2 + (n_g - center_g) ** 2 + (n_b - center_b) ** 2
            )
            if distance < threshold:
                weight = 1.0
            else:
                weight = math.exp(-distance / threshold)
            sum_r += n_r * weight
            sum_g += n_g * weight
            sum_b += n_b * weight
            weight_sum += weight

    if weight_sum <= 0.0:
        return 0.0, 0.0, 0.0, weight_sum
    return sum_r / weight_sum, sum_g / weight_sum, sum_b / weight_sum, weight_sum


__all__ = [
    "CONTRAST_CENTER",
    "box_blur_estimate",
    "clamp_channel",
    "range_weighted_average",
]
