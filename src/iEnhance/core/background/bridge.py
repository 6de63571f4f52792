"""Caller-side management of the background enhancement process."""

from __future__ import annotations

import itertools
import logging
import multiprocessing
import threading
import time
from abc import ABC, abstractmethod
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from ...config import EnhanceSettings
from ...errors import (
    BackgroundRequestError,
    BackgroundRuntimeError,
    BackgroundTimeoutError,
    BackgroundUnavailableError,
)
from ..pixel_buffer import EnhancementOptions, PixelBuffer
from .endpoint import serve
from .protocol import ENHANCE_ERROR, ENHANCE_RESULT, Message, enhance_request

_LOGGER = logging.getLogger(__name__)

MessageHandler = Callable[[Message], None]
FaultHandler = Callable[[BaseException], None]


class BackgroundChannel(ABC):
    """Transport to an isolated execution context running the endpoint.

    Implementations deliver every reply to ``on_message`` and report a
    context-level failure (crash, broken pipe) exactly once to ``on_fault``.
    """

    @abstractmethod
    def start(self, on_message: MessageHandler, on_fault: FaultHandler) -> None:
        """Bring the context up; raise if it cannot be started."""

    @abstractmethod
    def send(self, message: Message) -> None:
        """Deliver *message* to the context; raise if the transport is broken."""

    @abstractmethod
    def close(self) -> None:
        """Tear the context down.  Safe to call more than once."""


class ProcessChannel(BackgroundChannel):
    """Run :func:`~iEnhance.core.background.endpoint.serve` in a child process."""

    JOIN_TIMEOUT_S = 2.0

    def __init__(self, start_method: str = "spawn") -> None:
        self._start_method = start_method
        self._process: Optional[Any] = None
        self._request_conn: Optional[Any] = None
        self._reply_conn: Optional[Any] = None
        self._listener: Optional[threading.Thread] = None
        self._send_lock = threading.Lock()
        self._closing = False

    def start(self, on_message: MessageHandler, on_fault: FaultHandler) -> None:
        context = multiprocessing.get_context(self._start_method)
        child_requests, parent_requests = context.Pipe(duplex=False)
        parent_replies, child_replies = context.Pipe(duplex=False)
        process = context.Process(
            target=serve,
            args=(child_requests, child_replies),
            name="iEnhance-endpoint",
            daemon=True,
        )
        process.start()
        # Drop the parent's copies of the child ends so a dead child surfaces as
        # EOF on the reply pipe.
        child_requests.close()
        child_replies.close()

        self._process = process
        self._request_conn = parent_requests
        self._reply_conn = parent_replies
        self._listener = threading.Thread(
            target=self._listen,
            args=(on_message, on_fault),
            name="iEnhance-bridge-listener",
            daemon=True,
        )
        self._listener.start()
        _LOGGER.debug("Started enhancement endpoint process pid=%s", process.pid)

    def _listen(self, on_message: MessageHandler, on_fault: FaultHandler) -> None:
        conn = self._reply_conn
        while True:
            try:
                message = conn.recv()
            except Exception as exc:
                if not self._closing:
                    on_fault(exc)
                return
            on_message(message)

    def send(self, message: Message) -> None:
        if self._request_conn is None:
            raise BrokenPipeError("Enhancement endpoint is not running")
        with self._send_lock:
            self._request_conn.send(message)

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True

        if self._request_conn is not None:
            try:
                with self._send_lock:
                    self._request_conn.send(None)
            except OSError:
                pass
        process = self._process
        if process is not None:
            process.join(self.JOIN_TIMEOUT_S)
            if process.is_alive():
                _LOGGER.debug("Terminating unresponsive endpoint pid=%s", process.pid)
                process.terminate()
                process.join(self.JOIN_TIMEOUT_S)
        for conn in (self._request_conn, self._reply_conn):
            if conn is not None:
                conn.close()
        self._process = None
        self._request_conn = None
        self._reply_conn = None


class BridgeState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    FAILED = "permanently-failed"


@dataclass
class _PendingRequest:
    future: "Future[PixelBuffer]"
    timer: threading.Timer


def _reject(pending: List[_PendingRequest], error: Exception) -> None:
    for entry in pending:
        entry.timer.cancel()
        entry.future.set_exception(error)


class EnhancementBridge:
    """Dispatch enhancement requests to the background context and route replies.

    The bridge owns the only shared mutable state of the pipeline: the pending
    request table, the lifecycle state and the diagnostic counters.  All of it
    is guarded by ``_lock``; the listener thread, timers and callers only touch
    it through the methods below.

    Lifecycle: ``UNINITIALIZED`` → ``INITIALIZED`` → ``FAILED``.  The context is
    started lazily by the first :meth:`is_available` call.  A failed start or a
    runtime fault moves the bridge to ``FAILED`` for good.
    """

    DEFAULT_TIMEOUT_S = 30.0

    def __init__(
        self,
        channel_factory: Callable[[], BackgroundChannel] = ProcessChannel,
        *,
        timeout: float = DEFAULT_TIMEOUT_S,
        enabled: bool = True,
    ) -> None:
        self._channel_factory = channel_factory
        self._timeout = float(timeout)
        self._enabled = enabled
        self._lock = threading.RLock()
        self._state = BridgeState.UNINITIALIZED
        self._channel: Optional[BackgroundChannel] = None
        self._pending: Dict[str, _PendingRequest] = {}
        self._counter = itertools.count(1)
        self._late_replies = 0

    @classmethod
    def from_settings(cls, settings: EnhanceSettings) -> "EnhancementBridge":
        start_method = settings.start_method
        return cls(
            lambda: ProcessChannel(start_method),
            timeout=settings.timeout,
            enabled=settings.background_enabled,
        )

    @property
    def state(self) -> BridgeState:
        return self._state

    @property
    def pending_count(self) -> int:
        with self._lock:
            return len(self._pending)

    @property
    def late_replies(self) -> int:
        """Replies that arrived after their request timed out or was rejected."""

        with self._lock:
            return self._late_replies

    def is_available(self) -> bool:
        """Return ``True`` when requests can be dispatched to the background."""

        if not self._enabled:
            return False
        with self._lock:
            if self._state is BridgeState.FAILED:
                return False
            if self._state is BridgeState.UNINITIALIZED:
                return self._initialize()
            return self._channel is not None

    def _initialize(self) -> bool:
        try:
            channel = self._channel_factory()
            channel.start(self._handle_message, self._handle_fault)
        except Exception:
            _LOGGER.warning(
                "Failed to start background enhancement, using in-process fallback",
                exc_info=True,
            )
            self._state = BridgeState.FAILED
            return False
        self._channel = channel
        self._state = BridgeState.INITIALIZED
        _LOGGER.info("Background enhancement context initialized")
        return True

    def _next_request_id(self) -> str:
        with self._lock:
            sequence = next(self._counter)
        return f"req_{sequence}_{int(time.time() * 1000)}"

    def submit(self, buffer: PixelBuffer, options: EnhancementOptions) -> "Future[PixelBuffer]":
        """Dispatch *buffer* and return a future for the processed copy.

        The future fails with :class:`BackgroundTimeoutError`,
        :class:`BackgroundRequestError` or :class:`BackgroundRuntimeError`; it is
        always settled, at the latest when the deadline expires.
        """

        if not self.is_available():
            raise BackgroundUnavailableError("Background enhancement is not available")

        request_id = self._next_request_id()
        future: "Future[PixelBuffer]" = Future()
        # Move the future to RUNNING so callers cannot cancel it under us.
        future.set_running_or_notify_cancel()
        timer = threading.Timer(self._timeout, self._expire, args=(request_id,))
        timer.daemon = True

        with self._lock:
            channel = self._channel
            if channel is None:
                raise BackgroundUnavailableError("Background enhancement is not available")
            self._pending[request_id] = _PendingRequest(future, timer)
        timer.start()

        try:
            channel.send(enhance_request(request_id, buffer, options))
        except Exception as exc:
            self._handle_fault(exc)
        return future

    def enhance(self, buffer: PixelBuffer, options: EnhancementOptions) -> PixelBuffer:
        """Process *buffer* in the background and block until the reply arrives."""

        return self.submit(buffer, options).result()

    def _take(self, request_id: Any) -> Optional[_PendingRequest]:
        with self._lock:
            pending = self._pending.pop(request_id, None)
        if pending is not None:
            pending.timer.cancel()
        return pending

    def _expire(self, request_id: str) -> None:
        pending = self._take(request_id)
        if pending is None:
            return
        _LOGGER.warning(
            "Background enhancement request %s timed out after %.1fs", request_id, self._timeout
        )
        pending.future.set_exception(
            BackgroundTimeoutError(f"No reply within {self._timeout:.1f}s")
        )

    def _handle_message(self, message: Message) -> None:
        request_id = message.get("id") if isinstance(message, dict) else None
        pending = self._take(request_id)
        if pending is None:
            with self._lock:
                self._late_replies += 1
            _LOGGER.debug("Dropping reply for unknown or expired request %s", request_id)
            return

        kind = message.get("kind")
        if kind == ENHANCE_RESULT:
            try:
                buffer = PixelBuffer.from_wire(message["buffer"])
            except (KeyError, TypeError, ValueError) as exc:
                pending.future.set_exception(
                    BackgroundRequestError(f"Malformed result payload: {exc}")
                )
                return
            pending.future.set_result(buffer)
        elif kind == ENHANCE_ERROR:
            pending.future.set_exception(
                BackgroundRequestError(message.get("error") or "Background processing failed")
            )
        else:
            pending.future.set_exception(
                BackgroundRequestError(f"Unexpected reply kind {kind!r}")
            )

    def _handle_fault(self, exc: BaseException) -> None:
        with self._lock:
            if self._state is BridgeState.FAILED:
                return
            self._state = BridgeState.FAILED
            channel, self._channel = self._channel, None
            pending, self._pending = list(self._pending.values()), {}

        _LOGGER.error(
            "Background enhancement context failed; disabling it for this process",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        _reject(pending, BackgroundRuntimeError(f"Background context failed: {exc}"))
        if channel is not None:
            try:
                channel.close()
            except Exception:
                _LOGGER.debug("Error while closing failed background channel", exc_info=True)

    def shutdown(self) -> None:
        """Tear the context down, rejecting requests that are still pending.

        A later :meth:`is_available` call starts a fresh context unless the
        bridge has already failed permanently.
        """

        with self._lock:
            channel, self._channel = self._channel, None
            pending, self._pending = list(self._pending.values()), {}
            if self._state is BridgeState.INITIALIZED:
                self._state = BridgeState.UNINITIALIZED

        _reject(pending, BackgroundUnavailableError("Background bridge shut down"))
        if channel is not None:
            channel.close()
            _LOGGER.info("Background enhancement context shut down")


_DEFAULT_BRIDGE: Optional[EnhancementBridge] = None
_DEFAULT_BRIDGE_LOCK = threading.Lock()


def get_default_bridge() -> EnhancementBridge:
    """Return the process-wide bridge, creating it from the environment once."""

    global _DEFAULT_BRIDGE
    with _DEFAULT_BRIDGE_LOCK:
        if _DEFAULT_BRIDGE is None:
            _DEFAULT_BRIDGE = EnhancementBridge.from_settings(EnhanceSettings.from_env())
        return _DEFAULT_BRIDGE


def reset_default_bridge() -> None:
    """Shut down and forget the process-wide bridge."""

    global _DEFAULT_BRIDGE
    with _DEFAULT_BRIDGE_LOCK:
        bridge, _DEFAULT_BRIDGE = _DEFAULT_BRIDGE, None
    if bridge is not None:
        bridge.shutdown()


__all__ = [
    "BackgroundChannel",
    "BridgeState",
    "EnhancementBridge",
    "ProcessChannel",
    "get_default_bridge",
    "reset_default_bridge",
]
