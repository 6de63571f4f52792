"""Pixel buffer and option types exchanged between pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import numpy as np

CHANNELS = 4


@dataclass
class PixelBuffer:
    """Decoded RGBA pixels stored row-major in a private ``bytearray``.

    Stages mutate ``data`` in place, so the constructor always takes a copy of
    whatever bytes-like object it is handed.  That keeps a buffer from being
    aliased by the decoder, a wire payload or another stage.
    """

    width: int
    height: int
    data: bytearray = field(repr=False)

    def __post_init__(self) -> None:
        self.width = int(self.width)
        self.height = int(self.height)
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid pixel buffer size {self.width}x{self.height}")
        self.data = bytearray(self.data)
        expected = self.width * self.height * CHANNELS
        if len(self.data) != expected:
            raise ValueError(
                f"Pixel buffer holds {len(self.data)} bytes, expected {expected} "
                f"for {self.width}x{self.height} RGBA"
            )

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def as_array(self) -> np.ndarray:
        """Return a writable flat ``uint8`` view sharing memory with ``data``."""

        return np.frombuffer(self.data, dtype=np.uint8)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.width, self.height, self.data)

    def to_wire(self) -> dict[str, Any]:
        return {"width": self.width, "height": self.height, "data": bytes(self.data)}

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "PixelBuffer":
        """Rebuild a buffer from its ``{"width", "height", "data"}`` wire shape."""

        return cls(payload["width"], payload["height"], payload["data"])

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """Wrap an ``(height, width, 4)`` ``uint8`` array."""

        if array.ndim != 3 or array.shape[2] != CHANNELS:
            raise ValueError(f"Expected an (H, W, 4) array, got shape {array.shape}")
        height, width = array.shape[:2]
        contiguous = np.ascontiguousarray(array, dtype=np.uint8)
        return cls(width, height, contiguous.tobytes())


@dataclass(frozen=True)
class EnhancementOptions:
    """Intensities for the three enhancement stages, conventionally 0-100.

    A value of zero or below skips the matching stage.  Values are not clamped
    here; keeping them sane is the caller's job.
    """

    sharpness: float = 0.0
    denoise: float = 0.0
    contrast: float = 0.0

    @property
    def is_noop(self) -> bool:
        return self.sharpness <= 0 and self.denoise <= 0 and self.contrast <= 0

    def to_wire(self) -> dict[str, float]:
        return {
            "sharpness": float(self.sharpness),
            "denoise": float(self.denoise),
            "contrast": float(self.contrast),
        }

    @classmethod
    def from_wire(cls, payload: Mapping[str, Any]) -> "EnhancementOptions":
        return cls(
            sharpness=float(payload.get("sharpness", 0.0)),
            denoise=float(payload.get("denoise", 0.0)),
            contrast=float(payload.get("contrast", 0.0)),
        )


__all__ = ["CHANNELS", "EnhancementOptions", "PixelBuffer"]
