"""
Object Detector Configuration
=============================

Configuration dataclass for the webcam object detection loop.
"""

from dataclasses import dataclass

from livesense.exceptions import ConfigValidationError


@dataclass
class ObjectDetectorConfig:
    """Configuration for the video detection loop and its overlay window"""

    # Model
    model_id: str = "yolov8n-640"
    """Roboflow model ID for inference"""

    confidence_threshold: float = 0.5
    """Minimum confidence for returned detections"""

    # Input
    camera_index: int = 0
    """OpenCV camera index"""

    # Loop pacing
    target_fps: float = 60.0
    """Cycles per second (display refresh rate)"""

    # Overlay
    box_thickness: int = 2
    """Bounding box line thickness"""

    label_font_scale: float = 0.6
    """Font scale for detection labels"""

    display_fps: bool = True
    """Draw measured loop FPS on the frame"""

    window_name: str = "livesense"
    """OpenCV window title"""

    def __post_init__(self):
        self._validate()

    def _validate(self):
        """
        Raises:
            ConfigValidationError: If any validation fails
        """
        if not self.model_id or not self.model_id.strip():
            raise ConfigValidationError("model_id cannot be empty")

        if self.camera_index < 0:
            raise ConfigValidationError(f"camera_index must be >= 0, got {self.camera_index}")

        if self.target_fps <= 0:
            raise ConfigValidationError(f"target_fps must be > 0, got {self.target_fps}")

        if not (0 <= self.confidence_threshold <= 1):
            raise ConfigValidationError(
                f"confidence_threshold must be between 0 and 1, got {self.confidence_threshold}"
            )

        if self.box_thickness < 1:
            raise ConfigValidationError(f"box_thickness must be >= 1, got {self.box_thickness}")

    @property
    def frame_interval(self) -> float:
        """Seconds between loop cycles."""
        return 1.0 / self.target_fps

    def to_status_dict(self) -> dict:
        return {
            "model_id": self.model_id,
            "confidence_threshold": self.confidence_threshold,
            "camera_index": self.camera_index,
            "target_fps": self.target_fps,
        }
