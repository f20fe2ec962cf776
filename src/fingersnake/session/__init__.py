"""Streaming AI session module for fingersnake.

Provides a backend-agnostic transport interface and the adapter that
runs the connection state machine on top of it.

Public API:
    SessionTransport -- Abstract transport base class
    SessionAdapter -- Connection state machine and tool-call handling
    GeminiLiveTransport -- Gemini Live API implementation
"""

from fingersnake.session.adapter import SessionAdapter
from fingersnake.session.base import SessionError, SessionListener, SessionTransport

__all__ = [
    "GeminiLiveTransport",
    "SessionAdapter",
    "SessionError",
    "SessionListener",
    "SessionTransport",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "GeminiLiveTransport":
        from fingersnake.session.gemini import GeminiLiveTransport
        return GeminiLiveTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
