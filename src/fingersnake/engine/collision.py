"""Food pickup detection, growth trigger and respawn."""

from __future__ import annotations

import logging
import random

from fingersnake.domain.models import Point, SessionState
from fingersnake.engine.body import BodyChain

logger = logging.getLogger(__name__)


class CollisionSystem:
    """Tests the head against the food point once per tick.

    Only food collisions are modelled; walls wrap and the snake may
    cross itself freely.
    """

    def __init__(
        self,
        body: BodyChain,
        pickup_radius: float = 20.0,
        growth_score: int = 10,
        food_margin: float = 20.0,
        rng: random.Random | None = None,
    ) -> None:
        self._body = body
        self._pickup_radius = pickup_radius
        self._growth_score = growth_score
        self._food_margin = food_margin
        self._rng = rng or random.Random()

    def spawn_food(self, width: float, height: float) -> Point:
        """Pick a food position uniformly inside the canvas interior."""
        margin_x = min(self._food_margin, width / 2)
        margin_y = min(self._food_margin, height / 2)
        return Point(
            x=self._rng.uniform(margin_x, width - margin_x),
            y=self._rng.uniform(margin_y, height - margin_y),
        )

    def check(self, state: SessionState) -> bool:
        """Apply a pickup if the head is within reach of the food.

        Returns True when food was eaten this tick.
        """
        if state.head.distance_to(state.food) >= self._pickup_radius:
            return False

        state.score += self._growth_score
        state.chain = self._body.grow(state.chain)
        state.food = self.spawn_food(state.width, state.height)
        logger.info(
            "Food eaten: score=%d length=%d next food at (%.0f, %.0f)",
            state.score, state.length, state.food.x, state.food.y,
        )
        return True
