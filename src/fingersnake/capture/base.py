"""Abstract base class for vision capture sources.

All capture implementations must conform to this interface, enabling
the frame sampler to work with a webcam or a file-based test source
without changing the rest of the pipeline.
"""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod

from fingersnake.domain.models import CapturedFrame

logger = logging.getLogger(__name__)


class CaptureSource(ABC):
    """Abstract interface for capturing frames from a visual source.

    Example usage::

        async with WebcamCapture(device_index=0) as capture:
            frame = await capture.capture_frame()
    """

    def __init__(self) -> None:
        self._frame_counter: int = 0
        self._is_open: bool = False

    @property
    def is_open(self) -> bool:
        """Whether the capture device is currently open and ready."""
        return self._is_open

    @abstractmethod
    async def open(self) -> None:
        """Open and initialize the capture device.

        Raises:
            CameraAcquisitionError: If the device cannot be acquired.
        """
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release the capture device. Safe to call multiple times."""
        ...

    @abstractmethod
    async def capture_frame(self) -> CapturedFrame:
        """Capture a single frame from the source.

        Raises:
            CaptureError: If frame capture fails.
        """
        ...

    async def __aenter__(self) -> CaptureSource:
        """Async context manager entry -- opens the capture device."""
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        """Async context manager exit -- closes the capture device."""
        await self.close()


class CaptureError(Exception):
    """Raised when frame capture fails."""


class AcquisitionFailure(str, enum.Enum):
    """Why a camera could not be acquired."""

    PERMISSION_DENIED = "permission_denied"
    UNSUPPORTED_CONSTRAINTS = "unsupported_constraints"
    NOT_FOUND = "not_found"
    UNKNOWN = "unknown"


ACQUISITION_MESSAGES: dict[AcquisitionFailure, str] = {
    AcquisitionFailure.PERMISSION_DENIED: "Camera permission denied.",
    AcquisitionFailure.UNSUPPORTED_CONSTRAINTS: "Camera does not support the requested resolution.",
    AcquisitionFailure.NOT_FOUND: "No camera found.",
    AcquisitionFailure.UNKNOWN: "Camera unavailable.",
}


class CameraAcquisitionError(CaptureError):
    """Raised when the camera device cannot be opened."""

    def __init__(self, message: str, reason: AcquisitionFailure = AcquisitionFailure.UNKNOWN) -> None:
        super().__init__(message)
        self.reason = reason

    @property
    def user_message(self) -> str:
        return ACQUISITION_MESSAGES[self.reason]
