"""
Roboflow Object Detector
========================

ObjectDetector backed by a Roboflow ``inference`` model.
"""

import asyncio
from typing import Any, List, Optional

import numpy as np

from livesense.events.schema import BoundingBox, Detection
from livesense.exceptions import ModelLoadError
from livesense.logging_utils import get_component_logger

logger = get_component_logger(__name__, "object_detector")


class RoboflowObjectDetector:
    """
    Object detector for the video loop.

    The model loads in the background (``load()``); until then
    ``is_ready()`` is False and the loop skips inference.

    Args:
        model_id: Roboflow model ID (e.g. "yolov8n-640")
        confidence_threshold: Minimum confidence passed to the model

    Example:
        >>> detector = RoboflowObjectDetector("yolov8n-640")
        >>> await detector.load()
        >>> detections = await detector.detect(frame)
    """

    def __init__(self, model_id: str, confidence_threshold: float = 0.5):
        self.model_id = model_id
        self.confidence_threshold = confidence_threshold
        self._model: Optional[Any] = None

    def is_ready(self) -> bool:
        return self._model is not None

    async def load(self) -> None:
        """
        Load the model off the event loop.

        Raises:
            ModelLoadError: If the model cannot be loaded (not retried)
        """
        logger.info(
            "Loading detection model",
            extra={"event": "model_load_start", "model_id": self.model_id},
        )
        loop = asyncio.get_running_loop()
        try:
            self._model = await loop.run_in_executor(None, self._load_model)
        except Exception as e:
            logger.error(
                "Failed to load detection model",
                extra={
                    "event": "model_load_failed",
                    "model_id": self.model_id,
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                },
            )
            raise ModelLoadError(self.model_id, original_error=e) from e

        logger.info("Detection model ready", extra={"event": "model_loaded", "model_id": self.model_id})

    async def detect(self, frame: np.ndarray) -> List[Detection]:
        if self._model is None:
            raise RuntimeError("Model not loaded. Call load() first.")
        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(None, self._infer, frame)
        return to_detections(response)

    def _load_model(self) -> Any:
        # Import here to avoid hard dependency at module level
        from inference import get_model

        return get_model(model_id=self.model_id)

    def _infer(self, frame: np.ndarray) -> Any:
        responses = self._model.infer(frame, confidence=self.confidence_threshold)
        return responses[0] if isinstance(responses, list) else responses


def to_detections(response: Any) -> List[Detection]:
    """
    Convert a Roboflow object detection response to Detections.

    Roboflow boxes are center + size; Detections use the top-left corner.
    """
    detections = []
    for p in getattr(response, "predictions", []) or []:
        detections.append(
            Detection(
                label=p.class_name,
                score=p.confidence,
                bbox=BoundingBox(
                    x=p.x - p.width / 2,
                    y=p.y - p.height / 2,
                    width=p.width,
                    height=p.height,
                ),
            )
        )
    return detections
