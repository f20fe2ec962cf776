"""Webcam capture implementation using OpenCV.

Captures low-resolution frames from a local webcam device for the
fingertip tracker.
"""

from __future__ import annotations

import asyncio
import logging
import os
from datetime import datetime
from pathlib import Path

import cv2
import numpy as np

from fingersnake.capture.base import (
    AcquisitionFailure,
    CameraAcquisitionError,
    CaptureError,
    CaptureSource,
)
from fingersnake.domain.models import CapturedFrame

logger = logging.getLogger(__name__)


def classify_open_failure(device_index: int, dev_root: Path = Path("/dev")) -> AcquisitionFailure:
    """Best-effort reason for a failed VideoCapture open.

    Only V4L2 device nodes can be inspected; elsewhere the reason is
    UNKNOWN.
    """
    if not dev_root.is_dir():
        return AcquisitionFailure.UNKNOWN
    node = dev_root / f"video{device_index}"
    if not node.exists():
        return AcquisitionFailure.NOT_FOUND
    if not os.access(node, os.R_OK | os.W_OK):
        return AcquisitionFailure.PERMISSION_DENIED
    return AcquisitionFailure.UNKNOWN


class WebcamCapture(CaptureSource):
    """Captures frames from a webcam using OpenCV.

    Runs OpenCV's blocking capture in a thread pool executor to avoid
    blocking the async event loop.
    """

    def __init__(
        self,
        device_index: int = 0,
        resolution: tuple[int, int] | None = (320, 240),
    ) -> None:
        super().__init__()
        self._device_index = device_index
        self._resolution = resolution
        self._cap: cv2.VideoCapture | None = None

    async def open(self) -> None:
        """Open the webcam device."""
        loop = asyncio.get_running_loop()
        self._cap = await loop.run_in_executor(
            None, cv2.VideoCapture, self._device_index
        )
        if not self._cap.isOpened():
            self._cap = None
            reason = classify_open_failure(self._device_index)
            raise CameraAcquisitionError(
                f"Failed to open webcam device {self._device_index} ({reason.value})",
                reason=reason,
            )
        if self._resolution:
            w, h = self._resolution
            self._cap.set(cv2.CAP_PROP_FRAME_WIDTH, w)
            self._cap.set(cv2.CAP_PROP_FRAME_HEIGHT, h)
        actual_w = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_h = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        if actual_w <= 0 or actual_h <= 0:
            self._cap.release()
            self._cap = None
            raise CameraAcquisitionError(
                f"Webcam device {self._device_index} rejected resolution {self._resolution}",
                reason=AcquisitionFailure.UNSUPPORTED_CONSTRAINTS,
            )
        self._is_open = True
        logger.info(
            "Opened webcam device %d (%dx%d)",
            self._device_index, actual_w, actual_h,
        )

    async def close(self) -> None:
        """Release the webcam device."""
        if self._cap is not None and self._cap.isOpened():
            self._cap.release()
            logger.info("Released webcam device %d", self._device_index)
        self._cap = None
        self._is_open = False

    async def capture_frame(self) -> CapturedFrame:
        """Capture a single frame from the webcam."""
        if not self._is_open or self._cap is None:
            raise CaptureError("Webcam is not open")
        loop = asyncio.get_running_loop()
        frame = await loop.run_in_executor(None, self._capture_sync)
        self._frame_counter += 1
        return CapturedFrame(
            image=frame,
            timestamp=datetime.now(),
            frame_number=self._frame_counter,
            source_device=f"webcam:{self._device_index}",
        )

    def _capture_sync(self) -> np.ndarray:
        """Synchronous frame capture (runs in thread pool)."""
        ret, frame = self._cap.read()
        if not ret or frame is None:
            raise CaptureError("Failed to read frame from webcam")
        return frame
