"""Vision Capture module for fingersnake.

Provides webcam frame capture and the fixed-rate sampler that pushes
frames to the AI session. The abstract base class allows alternative
capture implementations (e.g., file-based testing).

Public API:
    CaptureSource -- Abstract base class
    WebcamCapture -- OpenCV webcam implementation
    FrameSampler -- Fixed-rate capture -> encode -> send timer
"""

from fingersnake.capture.base import (
    AcquisitionFailure,
    CameraAcquisitionError,
    CaptureError,
    CaptureSource,
)

__all__ = [
    "AcquisitionFailure",
    "CameraAcquisitionError",
    "CaptureError",
    "CaptureSource",
    "FrameSampler",
    "WebcamCapture",
]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "WebcamCapture":
        from fingersnake.capture.webcam import WebcamCapture
        return WebcamCapture
    if name == "FrameSampler":
        from fingersnake.capture.sampler import FrameSampler
        return FrameSampler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
