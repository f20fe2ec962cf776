"""Target tracking for fingersnake.

Public API:
    TargetResolver -- Merges the tracked fingertip with wander fallback
"""

from fingersnake.tracking.resolver import TargetResolver

__all__ = ["TargetResolver"]
