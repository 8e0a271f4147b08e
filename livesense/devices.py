"""
Device Enumeration
==================

Lists microphones (sounddevice) and cameras (OpenCV probe) for selection.
"""

import logging
from dataclasses import dataclass
from typing import List

import cv2

from livesense.exceptions import DeviceUnavailableError

logger = logging.getLogger(__name__)


@dataclass
class InputDevice:
    """One selectable input device"""

    device_id: str
    """Identifier passed back as ``device_id`` / ``camera_index``"""

    name: str
    kind: str
    """"audioinput" or "videoinput" """

    is_default: bool = False


def list_microphones() -> List[InputDevice]:
    """
    Input-capable audio devices.

    Raises:
        DeviceUnavailableError: If the audio backend cannot be queried
    """
    try:
        import sounddevice as sd

        devices = sd.query_devices()
        default_input = sd.default.device[0]
    except Exception as e:
        logger.error(
            f"Microphone enumeration failed: {e}",
            extra={"component": "devices", "event": "enumerate_failed", "kind": "audioinput"},
        )
        raise DeviceUnavailableError("audioinput", "enumeration failed", original_error=e) from e

    microphones = []
    for index, info in enumerate(devices):
        if info.get("max_input_channels", 0) <= 0:
            continue
        microphones.append(
            InputDevice(
                device_id=str(index),
                name=info.get("name", f"input {index}"),
                kind="audioinput",
                is_default=index == default_input,
            )
        )
    return microphones


def list_cameras(max_index: int = 5) -> List[InputDevice]:
    """
    Cameras that OpenCV can open, probing indices ``0..max_index - 1``.

    The first camera found is reported as the default.
    """
    cameras = []
    for index in range(max_index):
        capture = cv2.VideoCapture(index)
        try:
            if capture.isOpened():
                cameras.append(
                    InputDevice(
                        device_id=str(index),
                        name=f"camera {index}",
                        kind="videoinput",
                        is_default=not cameras,
                    )
                )
        finally:
            capture.release()
    return cameras
