"""Image processing utilities for fingersnake.

Frame downsizing and JPEG encoding used by the frame sampler before a
frame is pushed to the AI session.
"""

from __future__ import annotations

import base64
import logging

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class FrameEncodeError(Exception):
    """Raised when a frame cannot be encoded for transmission."""


def fit_within(image: np.ndarray, max_width: int, max_height: int) -> np.ndarray:
    """Downscale an image so it fits inside max_width x max_height.

    Preserves aspect ratio. Images that already fit are returned as-is;
    small images are never upscaled.
    """
    h, w = image.shape[:2]
    scale = min(max_width / w, max_height / h)
    if scale >= 1.0:
        return image
    new_w = max(1, int(w * scale))
    new_h = max(1, int(h * scale))
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_AREA)


def numpy_to_base64_jpeg(image: np.ndarray, quality: float = 0.5) -> str:
    """Convert a numpy image array (BGR, OpenCV format) to base64 JPEG.

    Args:
        image: BGR image.
        quality: JPEG quality in (0, 1], mapped onto OpenCV's 1-100 scale.

    Raises:
        FrameEncodeError: If the image is empty or OpenCV refuses it.
    """
    if image is None or image.size == 0:
        raise FrameEncodeError("Cannot encode an empty image")
    cv_quality = max(1, min(100, int(round(quality * 100))))
    try:
        success, buffer = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, cv_quality])
    except cv2.error as e:
        raise FrameEncodeError(f"OpenCV failed to encode JPEG: {e}") from e
    if not success:
        raise FrameEncodeError("Failed to encode image to JPEG")
    return base64.b64encode(buffer.tobytes()).decode("utf-8")
