"""iEnhance: best-effort photo enhancement with an isolated background worker."""

from __future__ import annotations

from .core.enhancer import ImageEnhancer, create_thumbnail, enhance_image
from .core.pixel_buffer import EnhancementOptions, PixelBuffer

__all__ = [
    "EnhancementOptions",
    "ImageEnhancer",
    "PixelBuffer",
    "create_thumbnail",
    "enhance_image",
]
