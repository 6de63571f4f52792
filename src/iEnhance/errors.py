"""Exception hierarchy for the enhancement pipeline."""

from __future__ import annotations


class IEnhanceError(Exception):
    """Base class for every error raised by :mod:`iEnhance`."""


class DecodeError(IEnhanceError):
    """Raised when encoded image bytes cannot be turned into pixels."""


class EncodeError(IEnhanceError):
    """Raised when a pixel buffer cannot be serialised back to an image."""


class StageProcessingError(IEnhanceError):
    """Raised when a kernel stage fails while transforming a buffer."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} stage failed: {message}")
        self.stage = stage


class BackgroundError(IEnhanceError):
    """Base class for failures reported by the background execution bridge."""


class BackgroundUnavailableError(BackgroundError):
    """Raised when background execution is disabled, shut down or failed."""


class BackgroundTimeoutError(BackgroundError):
    """Raised when a dispatched request receives no reply before its deadline."""


class BackgroundRuntimeError(BackgroundError):
    """Raised for every pending request when the background context faults."""


class BackgroundRequestError(BackgroundError):
    """Raised when the background context answers a request with an error."""


__all__ = [
    "BackgroundError",
    "BackgroundRequestError",
    "BackgroundRuntimeError",
    "BackgroundTimeoutError",
    "BackgroundUnavailableError",
    "DecodeError",
    "EncodeError",
    "IEnhanceError",
    "StageProcessingError",
]
