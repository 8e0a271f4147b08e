"""
Video Detection
===============

Webcam object detection with bounding-box overlays.
"""

from livesense.vision.camera import CameraFrameSource
from livesense.vision.config import ObjectDetectorConfig
from livesense.vision.detector import RoboflowObjectDetector
from livesense.vision.loop import CycleOutcome, VideoDetectionLoop
from livesense.vision.renderer import DetectionRenderer, WindowPresenter

__all__ = [
    "VideoDetectionLoop",
    "CycleOutcome",
    "ObjectDetectorConfig",
    "RoboflowObjectDetector",
    "CameraFrameSource",
    "DetectionRenderer",
    "WindowPresenter",
]
