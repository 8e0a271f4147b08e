"""
Detection Renderer
==================

Draws detections on video frames using supervision annotators, and shows
the result in an OpenCV window.
"""

import logging
import time
from typing import Callable, List, Optional

import cv2
import numpy as np
import supervision as sv

from livesense.events.schema import Detection
from livesense.vision.config import ObjectDetectorConfig

logger = logging.getLogger(__name__)


class DetectionRenderer:
    """
    Renders every detection as a box plus a ``label score`` tag.

    No filtering or ranking: whatever the detector returns is drawn.

    Args:
        config: ObjectDetectorConfig instance (None = defaults)

    Example:
        >>> renderer = DetectionRenderer(ObjectDetectorConfig())
        >>> image = renderer.render(frame, detections, fps=29.7)
    """

    def __init__(self, config: Optional[ObjectDetectorConfig] = None):
        self.config = config or ObjectDetectorConfig()

        self.box_annotator = sv.BoxAnnotator(
            thickness=self.config.box_thickness,
            color=sv.Color.GREEN,
        )
        self.label_annotator = sv.LabelAnnotator(
            text_scale=self.config.label_font_scale,
            text_thickness=2,
            text_color=sv.Color.BLACK,
            color=sv.Color.GREEN,
        )

    def render(self, frame: np.ndarray, detections: List[Detection], fps: Optional[float] = None) -> np.ndarray:
        """
        Render one frame.

        Args:
            frame: BGR image
            detections: Detections for this frame
            fps: Measured loop FPS (drawn when display_fps is on)

        Returns:
            Annotated copy of the frame
        """
        image = frame.copy()

        if detections:
            sv_detections = to_supervision_detections(detections)
            image = self.box_annotator.annotate(scene=image, detections=sv_detections)
            image = self.label_annotator.annotate(
                scene=image, detections=sv_detections, labels=create_labels(detections)
            )

        if self.config.display_fps and fps is not None:
            cv2.putText(
                image,
                f"FPS: {fps:.1f}",
                (10, 30),
                cv2.FONT_HERSHEY_SIMPLEX,
                0.6,
                (0, 255, 0),
                2,
            )

        return image


def to_supervision_detections(detections: List[Detection]) -> sv.Detections:
    """Convert Detections (top-left + size) to supervision xyxy format."""
    if not detections:
        return sv.Detections.empty()

    return sv.Detections(
        xyxy=np.array([d.bbox.to_xyxy() for d in detections], dtype=np.float32),
        confidence=np.array([d.score for d in detections], dtype=np.float32),
        class_id=np.zeros(len(detections), dtype=int),
    )


def create_labels(detections: List[Detection]) -> List[str]:
    """``label score`` tag for each detection, e.g. ``person 0.92``."""
    return [f"{d.label} {d.score:.2f}" for d in detections]


class WindowPresenter:
    """
    FramePresenter showing rendered frames in an OpenCV window.

    Args:
        renderer: DetectionRenderer
        window_name: Window title
        on_quit: Called when the user presses ``q``
    """

    def __init__(
        self,
        renderer: DetectionRenderer,
        window_name: str = "livesense",
        on_quit: Optional[Callable[[], None]] = None,
    ):
        self.renderer = renderer
        self.window_name = window_name
        self.on_quit = on_quit
        self.fps: Optional[float] = None
        self._last_present: Optional[float] = None

    def present(self, frame: np.ndarray, detections: List[Detection]) -> None:
        self._update_fps()
        image = self.renderer.render(frame, detections, fps=self.fps)
        cv2.imshow(self.window_name, image)

        if cv2.waitKey(1) & 0xFF == ord("q") and self.on_quit is not None:
            self.on_quit()

    def close(self) -> None:
        cv2.destroyAllWindows()

    def _update_fps(self) -> None:
        """Exponential moving average of the presentation rate."""
        now = time.monotonic()
        if self._last_present is not None:
            elapsed = now - self._last_present
            if elapsed > 0:
                instant = 1.0 / elapsed
                self.fps = instant if self.fps is None else 0.9 * self.fps + 0.1 * instant
        self._last_present = now
