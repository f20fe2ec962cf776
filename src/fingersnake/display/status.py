"""Latest human-readable status line shown in the HUD."""

from __future__ import annotations

import logging
from collections import deque

logger = logging.getLogger(__name__)

INITIAL_STATUS = "Waiting to start..."


class StatusBoard:
    """Keeps the most recent status notification and a short history."""

    def __init__(self, text: str = INITIAL_STATUS, history_size: int = 50) -> None:
        self._text = text
        self._history: deque[str] = deque(maxlen=history_size)

    @property
    def text(self) -> str:
        return self._text

    @property
    def history(self) -> list[str]:
        return list(self._history)

    def set(self, text: str) -> None:
        if text != self._text:
            logger.info("Status: %s", text)
        self._text = text
        self._history.append(text)
