"""The per-refresh game loop.

Ties together target resolution, steering, body relaxation and food
collision, one step per display refresh. Session health never reaches
this module: when tracking is gone the resolver simply hands back a
wander target.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from typing import Callable

from fingersnake.config.settings import GameConfig
from fingersnake.domain.models import Direction, GamePhase, Point, SessionState, Target
from fingersnake.engine.body import BodyChain
from fingersnake.engine.collision import CollisionSystem
from fingersnake.engine.steering import SteeringEngine
from fingersnake.tracking.resolver import TargetResolver

logger = logging.getLogger(__name__)


class GameLoop:
    """Orchestrates resolver -> steering -> body -> collision each tick.

    Coordinates: resolve target -> step head -> relax body -> check food
    """

    def __init__(
        self,
        state: SessionState,
        resolver: TargetResolver,
        steering: SteeringEngine,
        body: BodyChain,
        collision: CollisionSystem,
        initial_length: int = 10,
        on_score: Callable[[int], None] | None = None,
        on_phase: Callable[[GamePhase], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._state = state
        self._resolver = resolver
        self._steering = steering
        self._body = body
        self._collision = collision
        self._initial_length = initial_length
        self._on_score = on_score
        self._on_phase = on_phase
        self._clock = clock
        self._target: Target | None = None
        self._running = False

    @classmethod
    def from_config(
        cls,
        config: GameConfig,
        resolver: TargetResolver,
        rng: random.Random | None = None,
        on_score: Callable[[int], None] | None = None,
        on_phase: Callable[[GamePhase], None] | None = None,
    ) -> GameLoop:
        """Build a loop and its subsystems from the game configuration."""
        body = BodyChain(spacing=config.segment_spacing, growth_segments=config.growth_segments)
        return cls(
            state=SessionState(width=config.width, height=config.height),
            resolver=resolver,
            steering=SteeringEngine(
                width=config.width,
                height=config.height,
                speed=config.speed,
                turn_rate=config.turn_rate,
                deadband=config.deadband,
            ),
            body=body,
            collision=CollisionSystem(
                body=body,
                pickup_radius=config.pickup_radius,
                growth_score=config.growth_score,
                food_margin=config.food_margin,
                rng=rng,
            ),
            initial_length=config.initial_length,
            on_score=on_score,
            on_phase=on_phase,
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def target(self) -> Target | None:
        """Target resolved on the most recent tick."""
        return self._target

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def on_phase(self) -> Callable[[GamePhase], None] | None:
        """Called after every start / end transition with the new phase."""
        return self._on_phase

    @on_phase.setter
    def on_phase(self, callback: Callable[[GamePhase], None] | None) -> None:
        self._on_phase = callback

    def start(self) -> bool:
        """Enter PLAYING and initialize the game state.

        Initialization happens exactly once per start transition; calling
        start() while already playing changes nothing and returns False.
        """
        state = self._state
        if state.phase == GamePhase.PLAYING:
            return False
        origin = Point(x=state.width / 2, y=state.height / 2)
        state.chain = self._body.create(origin, self._initial_length)
        state.direction = Direction(x=1.0, y=0.0)
        state.score = 0
        state.tick = 0
        state.food = self._collision.spawn_food(state.width, state.height)
        state.phase = GamePhase.PLAYING
        self._target = None
        self._report_score()
        logger.info("Game started: %d segments on %.0fx%.0f", state.length, state.width, state.height)
        self._report_phase()
        return True

    def end(self) -> None:
        if self._state.phase != GamePhase.PLAYING:
            return
        self._state.phase = GamePhase.GAME_OVER
        logger.info("Game over: score=%d length=%d", self._state.score, self._state.length)
        self._report_phase()

    def resize(self, width: float, height: float) -> None:
        """Adopt new canvas bounds, respawning food that fell outside."""
        state = self._state
        state.width = width
        state.height = height
        self._steering.resize(width, height)
        self._resolver.resize(width, height)
        if state.phase == GamePhase.PLAYING and (state.food.x > width or state.food.y > height):
            state.food = self._collision.spawn_food(width, height)
        logger.debug("Canvas resized to %.0fx%.0f", width, height)

    def tick(self, now: float | None = None) -> Target | None:
        """Advance the game one step. No-op unless PLAYING."""
        state = self._state
        if state.phase != GamePhase.PLAYING:
            return None
        now = self._clock() if now is None else now

        target = self._resolver.resolve(now)
        result = self._steering.step(state.head, state.direction, target.point)
        state.direction = result.direction
        state.chain = self._body.relax(result.head, state.chain)
        if self._collision.check(state):
            self._report_score()
        state.tick += 1
        self._target = target
        return target

    async def run(self, display, fps: int = 60) -> None:
        """Drive the loop from a display until it asks to quit.

        Each iteration handles input, ticks, draws, then sleeps for the
        rest of the frame so other tasks on the event loop get to run.
        """
        from fingersnake.display.window import DisplayEvent

        loop = asyncio.get_running_loop()
        period = 1.0 / fps
        self._running = True
        logger.info("Game loop running at %d fps", fps)
        try:
            while self._running:
                frame_start = loop.time()
                for event in display.poll():
                    if event == DisplayEvent.QUIT:
                        self._running = False
                    elif event == DisplayEvent.START:
                        self.start()
                    elif event == DisplayEvent.END:
                        self.end()
                if not self._running:
                    break

                width, height = display.size
                if (width, height) != (self._state.width, self._state.height):
                    self.resize(width, height)

                self.tick()
                display.draw(self._state, self._target)
                await asyncio.sleep(max(0.0, period - (loop.time() - frame_start)))
        finally:
            self._running = False
            logger.info("Game loop finished: ticks=%d score=%d", self._state.tick, self._state.score)

    def stop(self) -> None:
        """Signal the loop to stop after the current frame."""
        self._running = False

    def _report_phase(self) -> None:
        if self._on_phase is not None:
            self._on_phase(self._state.phase)

    def _report_score(self) -> None:
        if self._on_score is not None:
            self._on_score(self._state.score)
