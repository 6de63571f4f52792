"""Public entry point that turns an encoded photo into an enhanced one.

Enhancement is best effort.  Whatever goes wrong (undecodable input, a dead
or slow background process, a failing stage, an encoder error), the caller
gets the original bytes back and never an exception.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ..config import DEFAULT_THUMBNAIL_SIZE, EnhanceSettings
from ..errors import (
    BackgroundError,
    DecodeError,
    EncodeError,
    StageProcessingError,
)
from ..utils.logging import get_logger
from .background.bridge import EnhancementBridge, get_default_bridge
from .codec import ImageCodec, split_data_url, to_data_url
from .filters import apply_enhancements
from .pixel_buffer import EnhancementOptions, PixelBuffer

_LOGGER = logging.getLogger(__name__)


class ImageEnhancer:
    """Decode, enhance (in the background when possible) and re-encode photos."""

    def __init__(
        self,
        bridge: Optional[EnhancementBridge] = None,
        codec: Optional[ImageCodec] = None,
        settings: Optional[EnhanceSettings] = None,
    ) -> None:
        self._bridge = bridge
        self._codec = codec if codec is not None else ImageCodec()
        self._settings = settings if settings is not None else EnhanceSettings()

    @property
    def bridge(self) -> Optional[EnhancementBridge]:
        return self._bridge

    def enhance(self, encoded: bytes, options: EnhancementOptions) -> bytes:
        """Return *encoded* with the requested stages applied, or unchanged on failure."""

        try:
            return self._enhance(encoded, options)
        except Exception:  # pragma: no cover - safety net, enhancement must never raise
            _LOGGER.exception("Unexpected enhancement failure; keeping original image")
            return encoded

    def _enhance(self, encoded: bytes, options: EnhancementOptions) -> bytes:
        try:
            decoded = self._codec.decode(encoded)
        except DecodeError as exc:
            _LOGGER.warning("Skipping enhancement, image could not be decoded: %s", exc)
            return encoded

        try:
            processed = self.process(decoded.buffer, options)
        except StageProcessingError as exc:
            _LOGGER.warning("Enhancement stage failed; keeping original image: %s", exc)
            return encoded

        try:
            return self._codec.encode(processed, decoded.format, quality=self._settings.quality)
        except EncodeError as exc:
            _LOGGER.warning("Could not re-encode enhanced image; keeping original: %s", exc)
            return encoded

    def process(self, buffer: PixelBuffer, options: EnhancementOptions) -> PixelBuffer:
        """Run the stage sequence on *buffer*, remotely if possible, else in-process.

        Background failures are logged and answered with one local attempt.
        Only :class:`StageProcessingError` from that local attempt propagates.
        """

        bridge = self._bridge
        if bridge is not None and bridge.is_available():
            try:
                result = bridge.enhance(buffer, options)
            except BackgroundError as exc:
                _LOGGER.warning(
                    "Background enhancement failed, falling back to in-process: %s", exc
                )
            else:
                _LOGGER.debug("Image enhanced in background context")
                return result
        return apply_enhancements(buffer, options)

    def enhance_data_url(self, data_url: str, options: EnhancementOptions) -> str:
        """Enhance a base64 ``data:`` URL, returning it unchanged on failure."""

        try:
            mime, payload = split_data_url(data_url)
        except DecodeError as exc:
            _LOGGER.warning("Skipping enhancement, invalid data URL: %s", exc)
            return data_url
        enhanced = self.enhance(payload, options)
        if enhanced is payload:
            return data_url
        return to_data_url(mime, enhanced)

    def create_thumbnail(self, encoded: bytes, max_size: int = DEFAULT_THUMBNAIL_SIZE) -> bytes:
        """Return a JPEG thumbnail of *encoded*, or *encoded* itself on failure."""

        try:
            return self._codec.thumbnail(
                encoded, max_size, quality=self._settings.thumbnail_quality
            )
        except (DecodeError, EncodeError, ValueError) as exc:
            _LOGGER.warning("Thumbnail generation failed: %s", exc)
            return encoded


_DEFAULT_ENHANCER: Optional[ImageEnhancer] = None
_DEFAULT_ENHANCER_LOCK = threading.Lock()


def get_default_enhancer() -> ImageEnhancer:
    global _DEFAULT_ENHANCER
    with _DEFAULT_ENHANCER_LOCK:
        if _DEFAULT_ENHANCER is None:
            settings = EnhanceSettings.from_env()
            get_logger(settings.log_level)
            _DEFAULT_ENHANCER = ImageEnhancer(bridge=get_default_bridge(), settings=settings)
        return _DEFAULT_ENHANCER


def enhance_image(encoded: bytes, options: EnhancementOptions) -> bytes:
    """Enhance *encoded* with the process-wide enhancer; never raises."""

    return get_default_enhancer().enhance(encoded, options)


def create_thumbnail(encoded: bytes, max_size: int = DEFAULT_THUMBNAIL_SIZE) -> bytes:
    return get_default_enhancer().create_thumbnail(encoded, max_size)


__all__ = [
    "ImageEnhancer",
    "create_thumbnail",
    "enhance_image",
    "get_default_enhancer",
]
