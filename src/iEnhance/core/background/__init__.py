"""Background execution of the kernel library in an isolated process."""

from .bridge import (
    BackgroundChannel,
    BridgeState,
    EnhancementBridge,
    ProcessChannel,
    get_default_bridge,
    reset_default_bridge,
)
from .endpoint import handle_message, serve

__all__ = [
    "BackgroundChannel",
    "BridgeState",
    "EnhancementBridge",
    "ProcessChannel",
    "get_default_bridge",
    "handle_message",
    "reset_default_bridge",
    "serve",
]
