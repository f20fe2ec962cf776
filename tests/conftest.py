"""Shared test fixtures for the fingersnake test suite.

Provides common fixtures used across unit tests: sample frames, a fake
monotonic clock, seeded randomness, game state and mock transports.
"""

from __future__ import annotations

import random
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import numpy as np
import pytest

from fingersnake.domain.models import CapturedFrame, Point, SessionState, ToolInvocation
from fingersnake.engine.body import BodyChain
from fingersnake.engine.collision import CollisionSystem
from fingersnake.engine.steering import SteeringEngine


class FakeClock:
    """Manually advanced stand-in for time.monotonic()."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ---------------------------------------------------------------------------
# Frame / Image Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_image() -> np.ndarray:
    """A small 640x480 gradient image for testing."""
    row = np.linspace(0, 255, 640, dtype=np.uint8)
    gray = np.tile(row, (480, 1))
    return np.dstack([gray, gray, gray])


@pytest.fixture
def sample_frame(sample_image: np.ndarray) -> CapturedFrame:
    """A CapturedFrame with a sample image."""
    return CapturedFrame(
        image=sample_image,
        timestamp=datetime(2025, 1, 1, 12, 0, 0),
        frame_number=1,
        source_device="test",
    )


# ---------------------------------------------------------------------------
# Engine Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def body() -> BodyChain:
    return BodyChain(spacing=10.0, growth_segments=5)


@pytest.fixture
def steering() -> SteeringEngine:
    return SteeringEngine(width=800, height=600)


@pytest.fixture
def collision(body: BodyChain, rng: random.Random) -> CollisionSystem:
    return CollisionSystem(body=body, rng=rng)


@pytest.fixture
def playing_state(body: BodyChain) -> SessionState:
    """An 800x600 state with a 10-segment chain centred on the canvas."""
    return SessionState(
        width=800,
        height=600,
        chain=body.create(Point(x=400, y=300), 10),
        food=Point(x=700, y=500),
    )


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def finger_call():
    """Factory for updateFingerPosition invocations."""

    def make(call_id: str, x: object, y: object, name: str = "updateFingerPosition") -> ToolInvocation:
        return ToolInvocation(id=call_id, name=name, args={"x": x, "y": y})

    return make


@pytest.fixture
def mock_transport() -> AsyncMock:
    """A mock SessionTransport for testing the adapter without a backend."""
    mock = AsyncMock()
    mock.name = "mock"
    return mock


@pytest.fixture
def mock_capture_source(sample_frame: CapturedFrame) -> AsyncMock:
    """A mock CaptureSource returning the sample frame."""
    mock = AsyncMock()
    mock.is_open = True
    mock.capture_frame.return_value = sample_frame
    return mock


@pytest.fixture
def status_sink() -> MagicMock:
    return MagicMock()
