"""Tests for the HUD status board."""

from __future__ import annotations

from fingersnake.display.status import INITIAL_STATUS, StatusBoard


def test_latest_status_wins() -> None:
    board = StatusBoard()
    assert board.text == INITIAL_STATUS
    board.set("Connecting to Gemini...")
    board.set("Connected. Tracking active.")
    assert board.text == "Connected. Tracking active."
    assert board.history == ["Connecting to Gemini...", "Connected. Tracking active."]


def test_history_is_a_copy() -> None:
    board = StatusBoard()
    board.set("Error")
    board.history.clear()
    assert board.history == ["Error"]


def test_history_is_bounded() -> None:
    board = StatusBoard(history_size=3)
    for i in range(10):
        board.set(f"status {i}")
    assert board.history == ["status 7", "status 8", "status 9"]
    assert board.text == "status 9"
