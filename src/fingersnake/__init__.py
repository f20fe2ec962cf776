"""fingersnake -- Fingertip-steered snake driven by a live vision model.

This package implements a snake game whose steering target comes from a
streaming AI session that watches the webcam and reports the user's
fingertip through tool calls. When the tracked signal goes stale the
snake falls back to an autonomous wander behaviour.
"""

__version__ = "0.1.0"
