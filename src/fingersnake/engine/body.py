"""Body chain propagation and growth.

Each trailing segment is pulled toward the segment ahead of it, in order
from the head outward, until it sits at the target spacing. The pull is
partial, so after growth the new segments stay bunched at the tail and
fan out over the following ticks.
"""

from __future__ import annotations

import logging
import math

from fingersnake.domain.models import Point, Segment

logger = logging.getLogger(__name__)


class BodyChain:
    """Spacing relaxation and growth for a list of segments."""

    def __init__(self, spacing: float = 10.0, growth_segments: int = 5) -> None:
        self._spacing = spacing
        self._growth_segments = growth_segments

    @property
    def spacing(self) -> float:
        return self._spacing

    @property
    def growth_segments(self) -> int:
        return self._growth_segments

    def create(self, origin: Point, length: int = 10) -> list[Segment]:
        """Build a straight chain trailing to the left of origin."""
        if length < 1:
            raise ValueError(f"Chain length must be at least 1, got {length}")
        return [
            Segment(x=origin.x - i * self._spacing, y=origin.y, id=i)
            for i in range(length)
        ]

    def relax(self, head: Point, chain: list[Segment]) -> list[Segment]:
        """Move the head to its new position and relax the trailing segments.

        Returns a new list; the head keeps its id.
        """
        if not chain:
            raise ValueError("Cannot relax an empty chain")

        new_chain = [Segment(x=head.x, y=head.y, id=chain[0].id)]
        prev = new_chain[0]
        for curr in chain[1:]:
            dx = prev.x - curr.x
            dy = prev.y - curr.y
            dist = math.hypot(dx, dy)
            if dist > self._spacing:
                factor = (dist - self._spacing) / dist
                curr = Segment(x=curr.x + dx * factor, y=curr.y + dy * factor, id=curr.id)
            new_chain.append(curr)
            prev = curr
        return new_chain

    def grow(self, chain: list[Segment], count: int | None = None) -> list[Segment]:
        """Append new segments stacked on the current tail."""
        if not chain:
            raise ValueError("Cannot grow an empty chain")
        count = self._growth_segments if count is None else count
        tail = chain[-1]
        next_id = max(segment.id for segment in chain) + 1
        grown = chain + [
            Segment(x=tail.x, y=tail.y, id=next_id + i) for i in range(count)
        ]
        logger.debug("Chain grew %d -> %d segments", len(chain), len(grown))
        return grown
