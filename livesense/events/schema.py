"""
Event Schema
============

Pydantic models for predictions, video detections and the speech
notification published to the notification sink.
"""

from typing import Literal

from pydantic import BaseModel, Field

UNKNOWN_LABEL = "unknown"


class Prediction(BaseModel):
    """One label with its confidence as a percentage"""

    label: str = Field(description="Class label from the model vocabulary")
    score: float = Field(ge=0.0, le=100.0, description="Confidence in percent")

    class Config:
        frozen = True

    @classmethod
    def from_confidence(cls, label: str, confidence: float) -> "Prediction":
        """Build from a [0, 1] confidence, rounded to two decimals in percent."""
        return cls(label=label, score=round(confidence * 100, 2))

    @property
    def is_unknown(self) -> bool:
        return self.label == UNKNOWN_LABEL


UNKNOWN_PREDICTION = Prediction(label=UNKNOWN_LABEL, score=0.0)


class SpeechNotification(BaseModel):
    """Top-prediction change sent to the notification sink"""

    detection_type: Literal["speech"] = Field(default="speech", alias="detectionType")
    class_name: str = Field(alias="className", description="New top label")
    score: float = Field(description="Confidence in percent")

    class Config:
        populate_by_name = True
        json_schema_extra = {
            "example": {"detectionType": "speech", "className": "yes", "score": 91.3}
        }

    @classmethod
    def from_prediction(cls, prediction: Prediction) -> "SpeechNotification":
        return cls(class_name=prediction.label, score=prediction.score)

    def to_wire(self) -> str:
        """Serialized JSON payload with camelCase keys."""
        return self.model_dump_json(by_alias=True)


class BoundingBox(BaseModel):
    """Bounding box (top-left corner + size, pixels)"""

    x: float = Field(description="Left edge")
    y: float = Field(description="Top edge")
    width: float = Field(ge=0.0, description="Box width")
    height: float = Field(ge=0.0, description="Box height")

    def to_xyxy(self) -> list:
        return [self.x, self.y, self.x + self.width, self.y + self.height]


class Detection(BaseModel):
    """Single object detection from the video variant"""

    label: str = Field(description="Detected class name")
    score: float = Field(ge=0.0, le=1.0, description="Detection confidence")
    bbox: BoundingBox = Field(description="Bounding box")

    class Config:
        json_schema_extra = {
            "example": {
                "label": "person",
                "score": 0.92,
                "bbox": {"x": 60, "y": 50, "width": 80, "height": 200},
            }
        }
