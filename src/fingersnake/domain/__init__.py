"""Domain models for fingersnake.

This package contains all core data structures, enumerations, and value
objects used throughout the system. All models use Pydantic v2 for
validation and serialization.
"""

from fingersnake.domain.models import (
    CapturedFrame,
    ConnectionState,
    Direction,
    EncodedFrame,
    FingerSignal,
    GamePhase,
    Point,
    Segment,
    SegmentChain,
    SessionState,
    Target,
    TargetSource,
    ToolAcknowledgement,
    ToolInvocation,
)

__all__ = [
    "CapturedFrame",
    "ConnectionState",
    "Direction",
    "EncodedFrame",
    "FingerSignal",
    "GamePhase",
    "Point",
    "Segment",
    "SegmentChain",
    "SessionState",
    "Target",
    "TargetSource",
    "ToolAcknowledgement",
    "ToolInvocation",
]
