"""
Tests for device enumeration with patched backends
"""

import sys
from types import SimpleNamespace

import pytest

from livesense import devices
from livesense.exceptions import DeviceUnavailableError


class FakeCapture:
    def __init__(self, opened):
        self.opened = opened
        self.released = False

    def isOpened(self):
        return self.opened

    def release(self):
        self.released = True


def test_list_cameras_checks_each_index(monkeypatch):
    captures = {}

    def fake_capture(index):
        captures[index] = FakeCapture(opened=index in (1, 2))
        return captures[index]

    monkeypatch.setattr(devices.cv2, "VideoCapture", fake_capture)

    cameras = devices.list_cameras(max_index=4)

    assert [c.device_id for c in cameras] == ["1", "2"]
    assert [c.is_default for c in cameras] == [True, False]
    assert all(c.kind == "videoinput" for c in cameras)
    assert all(capture.released for capture in captures.values())


def test_list_microphones_filters_outputs(monkeypatch):
    fake_sd = SimpleNamespace(
        query_devices=lambda: [
            {"name": "Speakers", "max_input_channels": 0},
            {"name": "USB Mic", "max_input_channels": 1},
            {"name": "Built-in Mic", "max_input_channels": 2},
        ],
        default=SimpleNamespace(device=[2, 0]),
    )
    monkeypatch.setitem(sys.modules, "sounddevice", fake_sd)

    microphones = devices.list_microphones()

    assert [(m.device_id, m.name, m.is_default) for m in microphones] == [
        ("1", "USB Mic", False),
        ("2", "Built-in Mic", True),
    ]


def test_list_microphones_backend_failure(monkeypatch):
    def broken():
        raise OSError("PortAudio library not found")

    monkeypatch.setitem(sys.modules, "sounddevice", SimpleNamespace(query_devices=broken))

    with pytest.raises(DeviceUnavailableError, match="audioinput"):
        devices.list_microphones()
