"""Target resolution: tracked fingertip with a wander fallback.

The resolver holds the most recent fingertip signal written by the
session adapter and, every game tick, decides whether that signal is
still live. A live signal is scaled into canvas space; a stale one hands
control to a patrol point that is resampled now and then so the snake
roams instead of teleporting its goal every frame.
"""

from __future__ import annotations

import logging
import random
import time
from typing import Callable

from fingersnake.domain.models import FingerSignal, Point, Target, TargetSource

logger = logging.getLogger(__name__)

LOST_TRACKING_STATUS = "Lost finger tracking..."
TRACKING_ACTIVE_STATUS = "Tracking active"


class TargetResolver:
    """Produces the authoritative steering target for each tick.

    The signal field has a single writer (the session adapter callback)
    and a single reader (the game loop), both on the same event loop.
    """

    def __init__(
        self,
        width: float,
        height: float,
        liveness_timeout: float = 2.0,
        wander_probability: float = 0.02,
        mirror_x: bool = True,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_status: Callable[[str], None] | None = None,
    ) -> None:
        self._width = width
        self._height = height
        self._liveness_timeout = liveness_timeout
        self._wander_probability = wander_probability
        self._mirror_x = mirror_x
        self._rng = rng or random.Random()
        self._clock = clock
        self._on_status = on_status
        self._signal: FingerSignal | None = None
        self._wander_target: Point | None = None
        self._source: TargetSource = TargetSource.WANDER
        self._loss_events = 0

    @property
    def signal(self) -> FingerSignal | None:
        return self._signal

    @property
    def source(self) -> TargetSource:
        """Source reported by the most recent resolve()."""
        return self._source

    @property
    def loss_events(self) -> int:
        """How many times tracking has been lost so far."""
        return self._loss_events

    def resize(self, width: float, height: float) -> None:
        self._width = width
        self._height = height
        if self._wander_target is not None and (
            self._wander_target.x > width or self._wander_target.y > height
        ):
            self._wander_target = None

    def update_signal(self, signal: FingerSignal) -> None:
        """Store a fresh fingertip signal. Last write wins."""
        self._signal = signal

    def clear_signal(self) -> None:
        self._signal = None

    def is_live(self, now: float | None = None) -> bool:
        if self._signal is None:
            return False
        now = self._clock() if now is None else now
        return now - self._signal.timestamp < self._liveness_timeout

    def resolve(self, now: float | None = None) -> Target:
        """Resolve the target for the current tick."""
        now = self._clock() if now is None else now
        signal = self._signal

        if signal is not None and now - signal.timestamp < self._liveness_timeout:
            self._set_source(TargetSource.TRACKED)
            x = 1.0 - signal.x if self._mirror_x else signal.x
            return Target(
                x=x * self._width,
                y=signal.y * self._height,
                source=TargetSource.TRACKED,
                timestamp=signal.timestamp,
            )

        self._set_source(TargetSource.WANDER)
        if self._wander_target is None or self._rng.random() < self._wander_probability:
            self._wander_target = Point(
                x=self._rng.uniform(0.0, self._width),
                y=self._rng.uniform(0.0, self._height),
            )
        return Target(
            x=self._wander_target.x,
            y=self._wander_target.y,
            source=TargetSource.WANDER,
            timestamp=now,
        )

    def _set_source(self, source: TargetSource) -> None:
        if source == self._source:
            return
        previous, self._source = self._source, source
        if previous == TargetSource.TRACKED and source == TargetSource.WANDER:
            self._loss_events += 1
            logger.info("Finger tracking lost, wandering (loss #%d)", self._loss_events)
            self._notify(LOST_TRACKING_STATUS)
        else:
            logger.info("Finger tracking acquired")
            self._notify(TRACKING_ACTIVE_STATUS)

    def _notify(self, status: str) -> None:
        if self._on_status is not None:
            self._on_status(status)
