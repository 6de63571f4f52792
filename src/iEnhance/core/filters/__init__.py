"""Pixel kernel library for the enhancement pipeline.

The package keeps the numeric work separate from how it is executed:
- algorithms: per-pixel helpers (clamp, blur estimate, range-weighted average)
- executors: JIT neighbourhood stages and the lookup-table contrast stage
- facade: the fixed denoise, sharpen, contrast sequence
"""

from __future__ import annotations

from .algorithms import box_blur_estimate, clamp_channel, range_weighted_average
from .facade import apply_enhancements
from .jit_executor import apply_denoise, apply_unsharp_mask
from .lut_executor import apply_contrast, build_contrast_lut

__all__ = [
    "apply_contrast",
    "apply_denoise",
    "apply_enhancements",
    "apply_unsharp_mask",
    "box_blur_estimate",
    "build_contrast_lut",
    "clamp_channel",
    "range_weighted_average",
]
