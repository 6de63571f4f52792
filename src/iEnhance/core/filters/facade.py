"""Stage sequencing shared by the local fallback and the background endpoint."""

from __future__ import annotations

import logging
from typing import Callable

from ...errors import StageProcessingError
from ..pixel_buffer import EnhancementOptions, PixelBuffer
from .jit_executor import apply_denoise, apply_unsharp_mask
from .lut_executor import apply_contrast

_LOGGER = logging.getLogger(__name__)

# Denoise runs before sharpening so noise is not amplified into false edges;
# contrast is a global remap and goes last.
STAGES: tuple[tuple[str, str, Callable[[PixelBuffer, float], None]], ...] = (
    ("denoise", "denoise", apply_denoise),
    ("sharpen", "sharpness", apply_unsharp_mask),
    ("contrast", "contrast", apply_contrast),
)


def apply_enhancements(buffer: PixelBuffer, options: EnhancementOptions) -> PixelBuffer:
    """Run every requested stage over *buffer* in place and return it.

    Stages whose intensity is zero or negative are skipped.  Any exception a
    stage raises is re-raised as :class:`StageProcessingError` naming the stage.
    """

    for stage, option_name, stage_fn in STAGES:
        strength = float(getattr(options, option_name))
        if strength <= 0:
            continue
        try:
            stage_fn(buffer, strength)
        except Exception as exc:
            raise StageProcessingError(stage, str(exc) or type(exc).__name__) from exc
        _LOGGER.debug(
            "Applied %s (%.1f) to %dx%d buffer", stage, strength, buffer.width, buffer.height
        )
    return buffer


__all__ = ["STAGES", "apply_enhancements"]
