"""
Events
======

Prediction models, the speech notification wire format and topic utilities.
"""

from livesense.events.protocol import topic_for_detection_type
from livesense.events.schema import (
    UNKNOWN_LABEL,
    UNKNOWN_PREDICTION,
    BoundingBox,
    Detection,
    Prediction,
    SpeechNotification,
)

__all__ = [
    "Prediction",
    "SpeechNotification",
    "Detection",
    "BoundingBox",
    "UNKNOWN_LABEL",
    "UNKNOWN_PREDICTION",
    "topic_for_detection_type",
]
