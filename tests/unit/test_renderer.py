"""
Tests for supervision-based detection rendering and Roboflow response conversion
"""

from types import SimpleNamespace

import numpy as np
import pytest
import supervision as sv

from livesense.events import BoundingBox, Detection
from livesense.vision import DetectionRenderer, ObjectDetectorConfig
from livesense.vision.detector import to_detections
from livesense.vision.renderer import create_labels, to_supervision_detections


@pytest.fixture
def detections():
    return [
        Detection(label="person", score=0.92, bbox=BoundingBox(x=10, y=20, width=30, height=40)),
        Detection(label="cup", score=0.41, bbox=BoundingBox(x=50, y=50, width=10, height=10)),
    ]


@pytest.fixture
def frame():
    return np.zeros((120, 160, 3), dtype=np.uint8)


def test_create_labels(detections):
    assert create_labels(detections) == ["person 0.92", "cup 0.41"]


def test_to_supervision_detections(detections):
    sv_detections = to_supervision_detections(detections)

    assert isinstance(sv_detections, sv.Detections)
    assert len(sv_detections) == 2
    np.testing.assert_allclose(sv_detections.xyxy[0], [10, 20, 40, 60])
    np.testing.assert_allclose(sv_detections.confidence, [0.92, 0.41], rtol=1e-6)


def test_to_supervision_detections_empty():
    assert len(to_supervision_detections([])) == 0


def test_render_draws_on_copy(frame, detections):
    renderer = DetectionRenderer(ObjectDetectorConfig(display_fps=False))

    image = renderer.render(frame, detections)

    assert image.shape == frame.shape
    assert image.any()
    assert not frame.any()


def test_render_without_detections_leaves_frame_clean(frame):
    renderer = DetectionRenderer(ObjectDetectorConfig(display_fps=False))

    image = renderer.render(frame, [])

    assert not image.any()


def test_render_fps_overlay(frame):
    renderer = DetectionRenderer(ObjectDetectorConfig(display_fps=True))

    assert renderer.render(frame, [], fps=30.0).any()
    assert not renderer.render(frame, [], fps=None).any()


def test_to_detections_converts_center_to_top_left():
    response = SimpleNamespace(
        predictions=[
            SimpleNamespace(class_name="dog", confidence=0.8, x=50.0, y=60.0, width=20.0, height=40.0),
        ]
    )

    result = to_detections(response)

    assert len(result) == 1
    assert result[0].label == "dog"
    assert result[0].score == 0.8
    assert result[0].bbox.x == 40.0
    assert result[0].bbox.y == 40.0
    assert result[0].bbox.to_xyxy() == [40.0, 40.0, 60.0, 80.0]


def test_to_detections_empty_response():
    assert to_detections(SimpleNamespace(predictions=[])) == []
