"""Message shapes exchanged with the background execution context.

Every message is a plain ``dict`` so it pickles cleanly across a
``multiprocessing`` pipe::

    {"kind": "enhance",        "id": str, "buffer": {...}, "options": {...}}
    {"kind": "enhance-result", "id": str, "buffer": {...}}
    {"kind": "enhance-error",  "id": str, "error": str}

Buffers travel as ``{"width": int, "height": int, "data": bytes}``.
"""

from __future__ import annotations

from typing import Any

from ..pixel_buffer import EnhancementOptions, PixelBuffer

ENHANCE = "enhance"
ENHANCE_RESULT = "enhance-result"
ENHANCE_ERROR = "enhance-error"

Message = dict[str, Any]


def enhance_request(
    request_id: str, buffer: PixelBuffer, options: EnhancementOptions
) -> Message:
    return {
        "kind": ENHANCE,
        "id": request_id,
        "buffer": buffer.to_wire(),
        "options": options.to_wire(),
    }


def result_reply(request_id: str, buffer: PixelBuffer) -> Message:
    return {"kind": ENHANCE_RESULT, "id": request_id, "buffer": buffer.to_wire()}


def error_reply(request_id: str, error: str) -> Message:
    return {"kind": ENHANCE_ERROR, "id": request_id, "error": error}


__all__ = [
    "ENHANCE",
    "ENHANCE_ERROR",
    "ENHANCE_RESULT",
    "Message",
    "enhance_request",
    "error_reply",
    "result_reply",
]
