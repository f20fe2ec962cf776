"""Game engine module for fingersnake.

Steering, body relaxation, food collision and the loop that runs them
once per display refresh.

Public API:
    SteeringEngine -- Smoothed heading and head advance
    BodyChain -- Segment spacing relaxation and growth
    CollisionSystem -- Food pickup and respawn
    GameLoop -- Per-tick orchestrator
"""

from fingersnake.engine.body import BodyChain
from fingersnake.engine.collision import CollisionSystem
from fingersnake.engine.loop import GameLoop
from fingersnake.engine.steering import SteeringEngine, SteeringResult, wrap

__all__ = [
    "BodyChain",
    "CollisionSystem",
    "GameLoop",
    "SteeringEngine",
    "SteeringResult",
    "wrap",
]
