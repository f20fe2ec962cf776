"""Game display renderer.

Draws the snake, food, the tracked-target marker and a one-line HUD in a
pygame window. The display is driven from the game loop: poll() for
input, draw() once per frame. pygame is imported lazily so the engine
can be used and tested without it.
"""

from __future__ import annotations

import enum
import logging

from fingersnake.display.status import StatusBoard
from fingersnake.domain.models import GamePhase, SessionState, Target, TargetSource

logger = logging.getLogger(__name__)

BACKGROUND = (15, 23, 42)
GRID = (30, 41, 59)
FOOD = (250, 204, 21)
BODY = (74, 222, 128)
HEAD = (236, 252, 203)
EYE = (0, 0, 0)
MARKER = (255, 255, 255)
HUD_TEXT = (226, 232, 240)

GRID_STEP = 40
BODY_WIDTH = 16


class DisplayEvent(str, enum.Enum):
    """Input the game loop reacts to."""

    QUIT = "quit"
    START = "start"
    END = "end"


class GameDisplay:
    """pygame window for one game.

    Example usage::

        display = GameDisplay(width=960, height=640, status=board)
        display.open()
        events = display.poll()
        display.draw(state, target)
        display.close()
    """

    def __init__(
        self,
        width: int = 960,
        height: int = 640,
        status: StatusBoard | None = None,
        window_title: str = "fingersnake",
        font_size: int = 20,
    ) -> None:
        self._width = width
        self._height = height
        self._status = status or StatusBoard()
        self._window_title = window_title
        self._font_size = font_size
        self._pygame = None
        self._screen = None
        self._font = None

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def is_open(self) -> bool:
        return self._screen is not None

    def open(self) -> None:
        """Create the window."""
        import pygame

        pygame.init()
        self._pygame = pygame
        self._screen = pygame.display.set_mode((self._width, self._height), pygame.RESIZABLE)
        pygame.display.set_caption(self._window_title)
        self._font = pygame.font.SysFont("monospace", self._font_size)
        logger.info("Display opened %dx%d", self._width, self._height)

    def close(self) -> None:
        if self._pygame is None:
            return
        self._pygame.quit()
        self._pygame = None
        self._screen = None
        logger.info("Display closed")

    def poll(self) -> list[DisplayEvent]:
        """Drain the pygame event queue into DisplayEvents."""
        pygame = self._pygame
        if pygame is None:
            return [DisplayEvent.QUIT]
        events: list[DisplayEvent] = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                events.append(DisplayEvent.QUIT)
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    events.append(DisplayEvent.QUIT)
                elif event.key in (pygame.K_SPACE, pygame.K_RETURN):
                    events.append(DisplayEvent.START)
                elif event.key == pygame.K_q:
                    events.append(DisplayEvent.END)
            elif event.type == pygame.VIDEORESIZE:
                self._width, self._height = event.w, event.h
        return events

    def draw(self, state: SessionState, target: Target | None) -> None:
        pygame = self._pygame
        if pygame is None:
            return
        screen = self._screen
        screen.fill(BACKGROUND)

        for x in range(0, self._width, GRID_STEP):
            pygame.draw.line(screen, GRID, (x, 0), (x, self._height))
        for y in range(0, self._height, GRID_STEP):
            pygame.draw.line(screen, GRID, (0, y), (self._width, y))

        if state.phase != GamePhase.IDLE and state.chain:
            pygame.draw.circle(screen, FOOD, (int(state.food.x), int(state.food.y)), 8)

            points = [(int(s.x), int(s.y)) for s in state.chain]
            if len(points) > 1:
                pygame.draw.lines(screen, BODY, False, points, BODY_WIDTH)
                for p in points:
                    pygame.draw.circle(screen, BODY, p, BODY_WIDTH // 2)
            head = points[0]
            pygame.draw.circle(screen, HEAD, head, 10)
            pygame.draw.circle(screen, EYE, head, 2)

        if target is not None and target.source == TargetSource.TRACKED:
            pygame.draw.circle(screen, MARKER, (int(target.x), int(target.y)), 20, 2)

        self._draw_hud(state)
        pygame.display.flip()

    def _draw_hud(self, state: SessionState) -> None:
        if state.phase == GamePhase.IDLE:
            hint = "SPACE to start"
        elif state.phase == GamePhase.GAME_OVER:
            hint = f"Game over - final score {state.score} - SPACE to play again"
        else:
            hint = f"Score {state.score}"
        line = f"{hint}   |   Status: {self._status.text}"
        surface = self._font.render(line, True, HUD_TEXT)
        self._screen.blit(surface, (12, 10))
