"""Abstract base class for streaming AI session transports.

A transport owns the connection to one tool-calling inference backend.
It exposes exactly four capabilities (open, send_frame, acknowledge,
close) and reports inbound traffic through a SessionListener, so the
session adapter never depends on backend-specific session objects.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from fingersnake.domain.models import EncodedFrame, ToolAcknowledgement, ToolInvocation

logger = logging.getLogger(__name__)


FINGER_TOOL_NAME = "updateFingerPosition"
FINGER_TOOL_DESCRIPTION = (
    "Update the coordinates of the user's index finger tip detected in the video stream."
)
FINGER_X_DESCRIPTION = (
    "The normalized X coordinate (0.0 to 1.0) of the finger tip. 0 is left, 1 is right."
)
FINGER_Y_DESCRIPTION = (
    "The normalized Y coordinate (0.0 to 1.0) of the finger tip. 0 is top, 1 is bottom."
)

DEFAULT_SYSTEM_INSTRUCTION = """You are a real-time vision tracker for a game.
Your task is to analyze the video stream and continuously locate the tip of the user's index finger.
When you see a finger, IMMEDIATELY call the 'updateFingerPosition' tool with the normalized X and Y coordinates (0.0 to 1.0).
Do not speak. Just track the finger.
If the hand is moving, predict where it is.
Prioritize speed.
"""


class SessionListener(ABC):
    """Receives inbound events from an open transport."""

    @abstractmethod
    async def on_invocations(self, invocations: list[ToolInvocation]) -> None:
        """Called once per inbound message that carries tool invocations."""
        ...

    @abstractmethod
    def on_close(self) -> None:
        """Called when the remote side closes the session."""
        ...

    @abstractmethod
    def on_error(self, error: Exception) -> None:
        """Called when the transport fails after the handshake."""
        ...


class SessionTransport(ABC):
    """Capability interface for one streaming AI backend.

    Example usage::

        transport = GeminiLiveTransport(api_key="...")
        await transport.open(listener)
        await transport.send_frame(frame)
        await transport.acknowledge(ack)
        await transport.close()
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short backend name used in logs and errors."""
        ...

    @abstractmethod
    async def open(self, listener: SessionListener) -> None:
        """Perform the handshake and start delivering events to listener.

        Returns once the session is usable.

        Raises:
            SessionError: If the handshake fails.
        """
        ...

    @abstractmethod
    async def send_frame(self, frame: EncodedFrame) -> None:
        """Push one video frame into the session.

        Raises:
            SessionError: If the frame cannot be sent.
        """
        ...

    @abstractmethod
    async def acknowledge(self, ack: ToolAcknowledgement) -> None:
        """Send the response for one tool invocation.

        Raises:
            SessionError: If the response cannot be sent.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Close the session and stop delivering events.

        Should be safe to call multiple times.
        """
        ...


class SessionError(Exception):
    """Raised when a session handshake or transport operation fails."""

    def __init__(self, message: str, backend: str = "") -> None:
        super().__init__(message)
        self.backend = backend
