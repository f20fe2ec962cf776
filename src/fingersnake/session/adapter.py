"""Session adapter: connection state machine over a SessionTransport.

The adapter owns the ConnectionState of the one active AI session. It
forwards frames while the session is open, turns inbound tool calls into
FingerSignals, and answers every tool call exactly once, because the
backend may hold further output until it sees the response.

Errors never leave the adapter as exceptions. They are reported through
the on_status / on_error callbacks so the game keeps running (in wander
mode) whatever happens to the session.

Every connect() starts a new epoch. Listener callbacks are bound to the
epoch they were created for and become no-ops once disconnect() or a
newer connect() has moved past it.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Callable

from fingersnake.domain.models import (
    ConnectionState,
    EncodedFrame,
    FingerSignal,
    ToolAcknowledgement,
    ToolInvocation,
)
from fingersnake.session.base import FINGER_TOOL_NAME, SessionListener, SessionTransport

logger = logging.getLogger(__name__)

STATUS_CONNECTING = "Connecting to Gemini..."
STATUS_OPEN = "Connected. Tracking active."
STATUS_CLOSED = "Disconnected"
STATUS_ERROR = "Error"
STATUS_CONNECT_FAILED = "Connection failed"


class MalformedInvocationError(ValueError):
    """Raised when a tool invocation carries unusable coordinates."""


def _coordinate(args: dict, key: str) -> float:
    value = args.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedInvocationError(f"{key!r} is not a number: {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise MalformedInvocationError(f"{key!r} is not finite: {value!r}")
    return max(0.0, min(1.0, value))


def decode_finger_signal(invocation: ToolInvocation, timestamp: float) -> FingerSignal:
    """Decode {x, y} from a tool invocation, clamping into [0, 1].

    Raises:
        MalformedInvocationError: If x or y is missing or not a finite number.
    """
    return FingerSignal(
        x=_coordinate(invocation.args, "x"),
        y=_coordinate(invocation.args, "y"),
        timestamp=timestamp,
    )


class _EpochListener(SessionListener):
    """Routes transport events to the adapter for one session epoch."""

    def __init__(self, adapter: SessionAdapter, epoch: int) -> None:
        self._adapter = adapter
        self._epoch = epoch

    async def on_invocations(self, invocations: list[ToolInvocation]) -> None:
        await self._adapter._handle_invocations(self._epoch, invocations)

    def on_close(self) -> None:
        self._adapter._handle_close(self._epoch)

    def on_error(self, error: Exception) -> None:
        self._adapter._handle_error(self._epoch, error)


class SessionAdapter:
    """Owns the streaming AI session for one game.

    Example usage::

        adapter = SessionAdapter(
            transport=GeminiLiveTransport(api_key="..."),
            on_signal=resolver.update_signal,
            on_status=status_board.set,
        )
        await adapter.connect()
        await adapter.send_frame(frame)
        await adapter.disconnect()
    """

    def __init__(
        self,
        transport: SessionTransport,
        on_signal: Callable[[FingerSignal], None] | None = None,
        on_status: Callable[[str], None] | None = None,
        on_error: Callable[[str], None] | None = None,
        on_disconnect: Callable[[], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._transport = transport
        self._on_signal = on_signal
        self._on_status = on_status
        self._on_error = on_error
        self._on_disconnect = on_disconnect
        self._clock = clock
        self._state = ConnectionState.IDLE
        self._epoch = 0
        self._frames_sent = 0
        self._acknowledgements_sent = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    @property
    def frames_sent(self) -> int:
        return self._frames_sent

    @property
    def acknowledgements_sent(self) -> int:
        return self._acknowledgements_sent

    async def connect(self) -> None:
        """Open a new session. Failures are reported, never raised."""
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
            logger.warning("connect() ignored: session already %s", self._state.value)
            return

        self._epoch += 1
        epoch = self._epoch
        self._state = ConnectionState.CONNECTING
        self._status(STATUS_CONNECTING)
        logger.info("Connecting session via %s (epoch %d)", self._transport.name, epoch)

        try:
            await self._transport.open(_EpochListener(self, epoch))
        except Exception as e:
            if epoch != self._epoch:
                logger.info("Handshake for stale epoch %d failed after teardown: %s", epoch, e)
                return
            self._state = ConnectionState.ERROR
            logger.error("Session handshake failed: %s", e)
            self._error(str(e))
            self._status(STATUS_CONNECT_FAILED)
            return

        if epoch != self._epoch:
            logger.info("Handshake for epoch %d completed after teardown, closing", epoch)
            await self._close_transport()
            return

        self._state = ConnectionState.OPEN
        self._status(STATUS_OPEN)
        logger.info("Session open (epoch %d)", epoch)

    async def send_frame(self, frame: EncodedFrame) -> bool:
        """Push a frame if the session is open; otherwise drop it.

        Returns True when the frame was handed to the transport.
        """
        if self._state != ConnectionState.OPEN:
            logger.debug("Dropping frame %d: session %s", frame.frame_number, self._state.value)
            return False
        try:
            await self._transport.send_frame(frame)
        except Exception as e:
            logger.error("Error sending frame %d: %s", frame.frame_number, e)
            return False
        self._frames_sent += 1
        return True

    async def disconnect(self) -> None:
        """Close the session. Idempotent; always ends in CLOSED."""
        self._epoch += 1
        await self._close_transport()
        self._state = ConnectionState.CLOSED
        if self._on_disconnect is not None:
            self._on_disconnect()
        self._status(STATUS_CLOSED)
        logger.info("Session disconnected")

    async def _close_transport(self) -> None:
        try:
            await self._transport.close()
        except Exception as e:
            logger.warning("Could not close session explicitly: %s", e)

    async def _handle_invocations(self, epoch: int, invocations: list[ToolInvocation]) -> None:
        if epoch != self._epoch:
            logger.debug("Ignoring %d invocations from stale epoch %d", len(invocations), epoch)
            return

        for invocation in invocations:
            # disconnect() may run while an acknowledgement is in flight.
            if epoch != self._epoch:
                logger.debug("Session epoch %d ended mid-batch, dropping %s", epoch, invocation.id)
                return
            self._apply_invocation(invocation)
            await self._acknowledge(invocation)

    def _apply_invocation(self, invocation: ToolInvocation) -> None:
        if invocation.name != FINGER_TOOL_NAME:
            logger.warning("Ignoring unknown tool %r (id=%s)", invocation.name, invocation.id)
            return
        try:
            signal = decode_finger_signal(invocation, self._clock())
        except MalformedInvocationError as e:
            logger.warning("Malformed %s call (id=%s): %s", invocation.name, invocation.id, e)
            return
        logger.debug("Finger at (%.3f, %.3f)", signal.x, signal.y)
        if self._on_signal is not None:
            self._on_signal(signal)

    async def _acknowledge(self, invocation: ToolInvocation) -> None:
        try:
            await self._transport.acknowledge(ToolAcknowledgement.for_invocation(invocation))
        except Exception as e:
            logger.error("Failed to acknowledge tool call %s: %s", invocation.id, e)
            return
        self._acknowledgements_sent += 1

    def _handle_close(self, epoch: int) -> None:
        if epoch != self._epoch:
            return
        self._state = ConnectionState.CLOSED
        self._status(STATUS_CLOSED)
        logger.info("Session closed by backend")

    def _handle_error(self, epoch: int, error: Exception) -> None:
        if epoch != self._epoch:
            return
        self._state = ConnectionState.ERROR
        logger.error("Session error: %s", error)
        self._error(str(error) or "Connection error")
        self._status(STATUS_ERROR)

    def _status(self, status: str) -> None:
        if self._on_status is not None:
            self._on_status(status)

    def _error(self, message: str) -> None:
        if self._on_error is not None:
            self._on_error(message)
