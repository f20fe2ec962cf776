"""Core domain models for the fingersnake system.

These models represent the data flowing through the system: canvas
points and body segments, the resolved steering target, fingertip
signals reported by the vision session, tool invocations and their
acknowledgements, captured and encoded camera frames, and the owned
mutable game state.
"""

from __future__ import annotations

import enum
import math
from datetime import datetime

import numpy as np
from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class TargetSource(str, enum.Enum):
    """Where the current steering target came from."""

    TRACKED = "tracked"  # Fresh fingertip signal from the vision session
    WANDER = "wander"  # Autonomous patrol point


class ConnectionState(str, enum.Enum):
    """Lifecycle state of the streaming AI session."""

    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    ERROR = "error"


class GamePhase(str, enum.Enum):
    """Phase of the game as driven by start/end transitions."""

    IDLE = "idle"
    PLAYING = "playing"
    GAME_OVER = "game_over"


# ---------------------------------------------------------------------------
# Geometry Models
# ---------------------------------------------------------------------------


class Point(BaseModel):
    """A position in canvas space (pixels), origin at top-left."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float

    def distance_to(self, other: Point) -> float:
        return math.hypot(other.x - self.x, other.y - self.y)


class Segment(Point):
    """One body segment. The id is stable for the life of the segment."""

    id: int = Field(ge=0, description="Stable per-segment identity")


class Direction(BaseModel):
    """Heading of the snake as a unit vector."""

    model_config = ConfigDict(frozen=True)

    x: float = 1.0
    y: float = 0.0

    @property
    def magnitude(self) -> float:
        return math.hypot(self.x, self.y)


SegmentChain = list[Segment]


# ---------------------------------------------------------------------------
# Tracking Models
# ---------------------------------------------------------------------------


class FingerSignal(BaseModel):
    """A fingertip position reported by the vision session.

    Coordinates are normalized to the camera frame (0 is left/top, 1 is
    right/bottom) and are NOT mirrored; mirroring happens when the signal
    is scaled into canvas space.
    """

    model_config = ConfigDict(frozen=True)

    x: float = Field(ge=0.0, le=1.0)
    y: float = Field(ge=0.0, le=1.0)
    timestamp: float = Field(description="time.monotonic() seconds when the signal arrived")


class Target(BaseModel):
    """The authoritative steering goal for one tick."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    source: TargetSource
    timestamp: float

    @property
    def point(self) -> Point:
        return Point(x=self.x, y=self.y)


# ---------------------------------------------------------------------------
# Session Protocol Models
# ---------------------------------------------------------------------------


class ToolInvocation(BaseModel):
    """One inbound function call from the AI backend."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Backend-assigned call id used to correlate the response")
    name: str
    args: dict = Field(default_factory=dict)


class ToolAcknowledgement(BaseModel):
    """The response sent back for exactly one ToolInvocation."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    response: dict = Field(default_factory=lambda: {"result": "ok"})

    @classmethod
    def for_invocation(cls, invocation: ToolInvocation) -> ToolAcknowledgement:
        return cls(id=invocation.id, name=invocation.name)


# ---------------------------------------------------------------------------
# Vision / Capture Models
# ---------------------------------------------------------------------------


class CapturedFrame(BaseModel):
    """A single frame captured from the webcam.

    Contains the raw image data as a numpy array along with metadata
    about when and how it was captured.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    image: np.ndarray = Field(description="Raw image data as BGR numpy array (OpenCV format)")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the frame was captured")
    frame_number: int = Field(ge=0, description="Sequential frame counter")
    source_device: str = Field(default="webcam", description="Identifier for the capture device")


class EncodedFrame(BaseModel):
    """A JPEG frame ready to be pushed to the AI session."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = Field(default="image/jpeg")
    data: str = Field(description="Base64-encoded image bytes")
    frame_number: int = Field(default=0, ge=0)

    def to_payload(self) -> dict[str, str]:
        """Wire shape of a realtime media push."""
        return {"mimeType": self.mime_type, "data": self.data}


# ---------------------------------------------------------------------------
# Game State
# ---------------------------------------------------------------------------


class SessionState(BaseModel):
    """Owned, mutable state of one game session.

    Passed by reference into each subsystem call; the game loop is the
    only writer.
    """

    width: float = Field(gt=0)
    height: float = Field(gt=0)
    chain: list[Segment] = Field(default_factory=list)
    direction: Direction = Field(default_factory=Direction)
    food: Point = Field(default_factory=lambda: Point(x=0.0, y=0.0))
    score: int = Field(default=0, ge=0)
    phase: GamePhase = Field(default=GamePhase.IDLE)
    tick: int = Field(default=0, ge=0)

    @property
    def head(self) -> Segment:
        return self.chain[0]

    @property
    def length(self) -> int:
        return len(self.chain)
