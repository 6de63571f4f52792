"""JIT-accelerated neighbourhood stages (denoise and unsharp mask) using Numba.

Both stages walk the interior of the image only: pixels closer than the stage
radius to any edge keep their original value.
"""

from __future__ import annotations

import numpy as np
from numba import jit

from ..pixel_buffer import PixelBuffer
from .algorithms import box_blur_estimate, clamp_channel, range_weighted_average

SHARPEN_RADIUS = 1
SHARPEN_GAIN = 1.5
DENOISE_THRESHOLD_SCALE = 30.0


def sharpen_amount(sharpness: float) -> float:
    return sharpness / 100.0 * SHARPEN_GAIN


def denoise_parameters(strength: float) -> tuple[int, float]:
    """Return the ``(radius, threshold)`` pair used for *strength*."""

    radius = 2 if strength > 50 else 1
    threshold = strength / 100.0 * DENOISE_THRESHOLD_SCALE
    return radius, threshold


def apply_unsharp_mask(buffer: PixelBuffer, sharpness: float) -> None:
    """Sharpen *buffer* in place by amplifying its difference from a box blur."""

    if sharpness <= 0:
        return
    pixels = buffer.as_array()
    _unsharp_mask_kernel(
        pixels,
        buffer.width,
        buffer.height,
        sharpen_amount(sharpness),
        SHARPEN_RADIUS,
    )


def apply_denoise(buffer: PixelBuffer, strength: float) -> None:
    """Smooth *buffer* in place with the range-weighted (edge-preserving) filter."""

    if strength <= 0:
        return
    radius, threshold = denoise_parameters(strength)
    pixels = buffer.as_array()
    _denoise_kernel(pixels, buffer.width, buffer.height, radius, threshold)


@jit(nopython=True, cache=True)
def _unsharp_mask_kernel(
    pixels: np.ndarray,
    width: int,
    height: int,
    amount: float,
    radius: int,
) -> None:
    """JIT-compiled unsharp mask over the interior pixels."""
    original = pixels.astype(np.float64)

    for y in range(radius, height - radius):
        for x in range(radius, width - radius):
            offset = (y * width + x) * 4
            blur_r, blur_g, blur_b = box_blur_estimate(original, width, x, y, radius)

            r = original[offset]
            g = original[offset + 1]
            b = original[offset + 2]
            pixels[offset] = clamp_channel(r + (r - blur_r) * amount)
            pixels[offset + 1] = clamp_channel(g + (g - blur_g) * amount)
            pixels[offset + 2] = clamp_channel(b + (b - blur_b) * amount)


@jit(nopython=True, cache=True)
def _denoise_kernel(
    pixels: np.ndarray,
    width: int,
    height: int,
    radius: int,
    threshold: float,
) -> None:
    """JIT-compiled range-weighted smoothing over the interior pixels."""
    original = pixels.astype(np.float64)

    for y in range(radius, height - radius):
        for x in range(radius, width - radius):
            offset = (y * width + x) * 4
            r, g, b, weight_sum = range_weighted_average(
                original, width, x, y, radius, threshold
            )
            if weight_sum > 0.0:
                pixels[offset] = clamp_channel(r)
                pixels[offset + 1] = clamp_channel(g)
                pixels[offset + 2] = clamp_channel(b)


__all__ = [
    "apply_denoise",
    "apply_unsharp_mask",
    "denoise_parameters",
    "sharpen_amount",
]
