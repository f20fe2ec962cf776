"""Steering for the snake head.

Turns a target point into a smoothed heading and advances the head one
step. The heading is blended toward the desired direction with a fixed
turn rate, so the snake can never snap-rotate no matter how far the
target jumps between tracking updates.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

from fingersnake.domain.models import Direction, Point

logger = logging.getLogger(__name__)


class SteeringResult(NamedTuple):
    head: Point
    direction: Direction
    moved: bool


def wrap(value: float, bound: float) -> float:
    """Toroidal wrap of a coordinate into [0, bound)."""
    wrapped = value % bound
    # Tiny negatives round up to bound itself.
    return 0.0 if wrapped >= bound else wrapped


class SteeringEngine:
    """First-order heading filter plus constant-speed head advance.

    Example usage::

        engine = SteeringEngine(width=800, height=600)
        result = engine.step(head, direction, target)
    """

    def __init__(
        self,
        width: float,
        height: float,
        speed: float = 3.0,
        turn_rate: float = 0.15,
        deadband: float = 10.0,
    ) -> None:
        self._width = width
        self._height = height
        self._speed = speed
        self._turn_rate = turn_rate
        self._deadband = deadband

    def resize(self, width: float, height: float) -> None:
        self._width = width
        self._height = height

    def turn(self, direction: Direction, desired_x: float, desired_y: float) -> Direction | None:
        """Blend the heading toward a desired unit vector.

        Returns None when the blended vector has no length.
        """
        nx = direction.x + (desired_x - direction.x) * self._turn_rate
        ny = direction.y + (desired_y - direction.y) * self._turn_rate
        length = math.hypot(nx, ny)
        if length == 0.0:
            return None
        return Direction(x=nx / length, y=ny / length)

    def step(self, head: Point, direction: Direction, target: Point) -> SteeringResult:
        """Advance the head one tick toward the target.

        Within the deadband the heading is held and the head stays put.
        """
        dx = target.x - head.x
        dy = target.y - head.y
        dist = math.hypot(dx, dy)
        if dist <= self._deadband or dist == 0.0:
            return SteeringResult(head, direction, False)

        new_direction = self.turn(direction, dx / dist, dy / dist)
        if new_direction is None:
            logger.debug("Degenerate heading blend at (%.1f, %.1f), holding", head.x, head.y)
            return SteeringResult(head, direction, False)

        new_head = Point(
            x=wrap(head.x + new_direction.x * self._speed, self._width),
            y=wrap(head.y + new_direction.y * self._speed, self._height),
        )
        return SteeringResult(new_head, new_direction, True)
