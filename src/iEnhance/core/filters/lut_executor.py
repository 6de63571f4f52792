"""Lookup-table executor for the global contrast remap.

Contrast depends on nothing but the channel value, so the curve is evaluated
once for all 256 inputs and then applied to the whole buffer with a single
NumPy gather.
"""

from __future__ import annotations

import numpy as np

from ..pixel_buffer import CHANNELS, PixelBuffer
from .algorithms import CONTRAST_CENTER, clamp_channel

CONTRAST_GAIN = 0.5


def contrast_factor(strength: float) -> float:
    return 1.0 + strength / 100.0 * CONTRAST_GAIN


def build_contrast_lut(strength: float) -> np.ndarray:
    """Pre-compute the contrast curve for every possible 8-bit channel value."""

    factor = contrast_factor(strength)
    lut = np.empty(256, dtype=np.uint8)
    for channel_value in range(256):
        lut[channel_value] = clamp_channel(
            (channel_value - CONTRAST_CENTER) * factor + CONTRAST_CENTER
        )
    return lut


def apply_contrast(buffer: PixelBuffer, strength: float) -> None:
    """Stretch every pixel's RGB around mid-gray in place; alpha is untouched."""

    if strength <= 0:
        return
    lut = build_contrast_lut(strength)
    pixels = buffer.as_array().reshape(-1, CHANNELS)
    rgb = pixels[:, :3]
    rgb[...] = lut[rgb]


__all__ = ["apply_contrast", "build_contrast_lut", "contrast_factor"]
