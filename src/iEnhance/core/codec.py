"""Pillow-backed image codec used to move between encoded bytes and pixels."""

from __future__ import annotations

import base64
import binascii
import io
import re
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from ..errors import DecodeError, EncodeError
from .pixel_buffer import PixelBuffer

# Formats Pillow cannot write with an alpha channel.
_OPAQUE_FORMATS = frozenset({"JPEG", "BMP"})
_QUALITY_FORMATS = frozenset({"JPEG", "WEBP"})
# Multi-picture JPEGs from phone cameras are written back as plain JPEG.
_ENCODE_AS = {"MPO": "JPEG"}
_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^,;]*)*?);base64,", re.I)


@dataclass(frozen=True)
class DecodedImage:
    """Pixels decoded from an image along with the container format they came from."""

    buffer: PixelBuffer
    format: str


def calculate_thumbnail_size(width: int, height: int, max_size: int) -> tuple[int, int]:
    """Scale ``(width, height)`` so the longer side equals *max_size*."""

    if width <= 0 or height <= 0 or max_size <= 0:
        raise ValueError("Thumbnail dimensions must be positive")
    aspect_ratio = width / height
    if aspect_ratio > 1:
        return max_size, max(1, round(max_size / aspect_ratio))
    return max(1, round(max_size * aspect_ratio)), max_size


def split_data_url(data_url: str) -> tuple[str, bytes]:
    """Return ``(mime_type, payload)`` for a base64 ``data:`` URL."""

    match = _DATA_URL.match(data_url)
    if match is None:
        raise DecodeError("Not a base64 data URL")
    mime = match.group("mime") or "application/octet-stream"
    try:
        payload = base64.b64decode(data_url[match.end():], validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"Invalid base64 payload: {exc}") from exc
    return mime, payload


def to_data_url(mime: str, payload: bytes) -> str:
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


class ImageCodec:
    """Decode encoded photos into RGBA buffers and encode them back."""

    def decode(self, data: bytes) -> DecodedImage:
        try:
            with Image.open(io.BytesIO(data)) as source:
                fmt = source.format or "PNG"
                rgba = ImageOps.exif_transpose(source).convert("RGBA")
                buffer = PixelBuffer(rgba.width, rgba.height, rgba.tobytes())
        except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
            raise DecodeError(f"Cannot decode image: {exc}") from exc
        return DecodedImage(buffer, fmt.upper())

    def encode(self, buffer: PixelBuffer, fmt: str, *, quality: int) -> bytes:
        fmt = fmt.upper()
        fmt = _ENCODE_AS.get(fmt, fmt)
        try:
            image = Image.frombytes("RGBA", buffer.size, bytes(buffer.data))
            if fmt in _OPAQUE_FORMATS:
                image = image.convert("RGB")
            params = {"quality": int(quality)} if fmt in _QUALITY_FORMATS else {}
            output = io.BytesIO()
            image.save(output, format=fmt, **params)
        except (OSError, ValueError, KeyError) as exc:
            raise EncodeError(f"Cannot encode {fmt} image: {exc}") from exc
        return output.getvalue()

    def thumbnail(self, data: bytes, max_size: int, *, quality: int) -> bytes:
        """Return a JPEG thumbnail whose longer side is *max_size* pixels."""

        decoded = self.decode(data)
        size = calculate_thumbnail_size(decoded.buffer.width, decoded.buffer.height, max_size)
        try:
            image = Image.frombytes("RGBA", decoded.buffer.size, bytes(decoded.buffer.data))
            image = image.resize(size, Image.Resampling.LANCZOS)
            resized = PixelBuffer(image.width, image.height, image.tobytes())
        except (OSError, ValueError) as exc:
            raise EncodeError(f"Cannot resize image: {exc}") from exc
        return self.encode(resized, "JPEG", quality=quality)


__all__ = [
    "DecodedImage",
    "ImageCodec",
    "calculate_thumbnail_size",
    "split_data_url",
    "to_data_url",
]
