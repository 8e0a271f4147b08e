"""
Camera Frame Source
===================

OpenCV webcam capture for the video loop.
"""

import logging
from typing import Optional

import cv2
import numpy as np

logger = logging.getLogger(__name__)


class CameraFrameSource:
    """
    FrameSource over ``cv2.VideoCapture``.

    A camera that fails to open is logged once and then simply yields no
    frames, so the loop keeps running without inference.

    Args:
        camera_index: OpenCV camera index
    """

    def __init__(self, camera_index: int = 0):
        self.camera_index = camera_index
        self._capture: Optional[cv2.VideoCapture] = None
        self._failed = False

    def open(self) -> bool:
        """Open the camera. Returns False (and logs) on failure."""
        capture = cv2.VideoCapture(self.camera_index)
        if not capture.isOpened():
            capture.release()
            self._failed = True
            logger.error(
                f"Failed to open camera {self.camera_index}",
                extra={"component": "camera", "event": "camera_open_failed", "camera_index": self.camera_index},
            )
            return False

        self._capture = capture
        logger.info(
            f"Camera {self.camera_index} opened",
            extra={"component": "camera", "event": "camera_opened", "camera_index": self.camera_index},
        )
        return True

    def read(self) -> Optional[np.ndarray]:
        if self._capture is None:
            if self._failed or not self.open():
                return None

        ok, frame = self._capture.read()
        if not ok:
            return None
        return frame

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
