"""Message-driven wrapper around the kernel library for the worker process."""

from __future__ import annotations

import logging
from typing import Any, Mapping

from ..filters import apply_enhancements
from ..pixel_buffer import EnhancementOptions, PixelBuffer
from .protocol import ENHANCE, Message, error_reply, result_reply

_LOGGER = logging.getLogger(__name__)


def handle_message(message: Mapping[str, Any]) -> Message | None:
    """Process one request and return the reply to send back.

    Returns ``None`` for anything that is not an ``enhance`` request.  Every
    ``enhance`` request yields exactly one reply: the transformed buffer, or an
    error describing why the stages could not run.
    """

    if not isinstance(message, Mapping) or message.get("kind") != ENHANCE:
        _LOGGER.warning("Ignoring unexpected message: %r", message)
        return None

    request_id = message.get("id")
    try:
        buffer = PixelBuffer.from_wire(message["buffer"])
        options = EnhancementOptions.from_wire(message["options"])
        apply_enhancements(buffer, options)
    except Exception as exc:
        _LOGGER.warning("Enhancement request %s failed: %s", request_id, exc)
        return error_reply(request_id, str(exc) or type(exc).__name__)
    return result_reply(request_id, buffer)


def serve(requests: Any, replies: Any) -> None:
    """Run the request loop of the background process.

    *requests* and *replies* are one-way ``multiprocessing`` connections.  The
    loop ends on a ``None`` sentinel or once the parent closes its end.
    """

    _LOGGER.debug("Enhancement endpoint started")
    while True:
        try:
            message = requests.recv()
        except (EOFError, OSError):
            break
        if message is None:
            break
        reply = handle_message(message)
        if reply is not None:
            replies.send(reply)
    _LOGGER.debug("Enhancement endpoint stopped")


__all__ = ["handle_message", "serve"]
