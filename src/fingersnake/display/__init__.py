"""Display module for fingersnake.

Public API:
    StatusBoard -- Latest status text for the HUD
    GameDisplay -- pygame window (pygame imported on open)
    DisplayEvent -- Input events consumed by the game loop
"""

from fingersnake.display.status import StatusBoard
from fingersnake.display.window import DisplayEvent, GameDisplay

__all__ = ["DisplayEvent", "GameDisplay", "StatusBoard"]
