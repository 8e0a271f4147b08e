"""
Unit tests for event schemas and topic utilities
"""

import json

import pytest

from livesense.events import (
    UNKNOWN_PREDICTION,
    BoundingBox,
    Detection,
    Prediction,
    SpeechNotification,
    topic_for_detection_type,
)


class TestPrediction:
    def test_from_confidence_converts_to_percent(self):
        p = Prediction.from_confidence("yes", 0.9)
        assert p.label == "yes"
        assert p.score == 90.0

    def test_from_confidence_rounds_to_two_decimals(self):
        p = Prediction.from_confidence("no", 0.123456)
        assert p.score == 12.35

    def test_score_out_of_range_rejected(self):
        with pytest.raises(Exception):  # Pydantic validation error
            Prediction(label="yes", score=120.0)

    def test_unknown_sentinel(self):
        assert UNKNOWN_PREDICTION.is_unknown
        assert UNKNOWN_PREDICTION.score == 0.0
        assert not Prediction(label="yes", score=80.0).is_unknown

    def test_predictions_are_immutable(self):
        p = Prediction(label="yes", score=80.0)
        with pytest.raises(Exception):
            p.label = "no"


class TestSpeechNotification:
    def test_wire_format_uses_camel_case(self):
        notification = SpeechNotification.from_prediction(Prediction(label="B", score=70.0))

        payload = json.loads(notification.to_wire())

        assert payload == {"detectionType": "speech", "className": "B", "score": 70.0}

    def test_accepts_field_names_and_aliases(self):
        by_name = SpeechNotification(class_name="up", score=88.0)
        by_alias = SpeechNotification.model_validate({"className": "up", "score": 88.0})
        assert by_name == by_alias

    def test_detection_type_is_fixed(self):
        with pytest.raises(Exception):
            SpeechNotification(detection_type="video", class_name="up", score=88.0)

    def test_round_trip_from_wire(self):
        notification = SpeechNotification(class_name="left", score=91.5)
        parsed = SpeechNotification.model_validate_json(notification.to_wire())
        assert parsed.class_name == "left"


class TestDetection:
    def test_bbox_to_xyxy(self):
        bbox = BoundingBox(x=10, y=20, width=30, height=40)
        assert bbox.to_xyxy() == [10, 20, 40, 60]

    def test_detection_score_validation(self):
        bbox = BoundingBox(x=0, y=0, width=10, height=10)
        assert Detection(label="cup", score=0.5, bbox=bbox).score == 0.5

        with pytest.raises(Exception):
            Detection(label="cup", score=1.5, bbox=bbox)

    def test_negative_size_rejected(self):
        with pytest.raises(Exception):
            BoundingBox(x=0, y=0, width=-1, height=10)


class TestTopics:
    def test_default_prefix(self):
        assert topic_for_detection_type("speech") == "livesense/detections/speech"

    def test_trailing_slash_in_prefix(self):
        assert topic_for_detection_type("speech", prefix="lab/events/") == "lab/events/speech"
