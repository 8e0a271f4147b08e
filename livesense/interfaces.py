"""
Interfaces for Dependency Injection
====================================

Protocols for the external collaborators of the detection loops.

This allows:
- Testing with fake implementations (no microphone, camera, model or broker)
- Swapping implementations (e.g. another recognizer backend, another broker)
- Clear contracts (only the methods the loops actually call)

Structural subtyping is used so that third-party objects such as
``paho.mqtt.client.Client`` satisfy the protocols without wrappers.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Protocol

if TYPE_CHECKING:
    import numpy as np

    from livesense.events.schema import Detection
    from livesense.speech.config import ListenOptions


@dataclass
class RecognitionResult:
    """
    One score batch delivered by a speech recognizer.

    ``scores`` is aligned by index with the recognizer's ``word_labels()``.
    ``spectrogram`` is only present when the listen options request it.
    """

    scores: List[float]
    spectrogram: Optional[Any] = None


ResultCallback = Callable[[RecognitionResult], Any]
"""Callback invoked by a recognizer for every score batch (sync or async)."""


class MessageBroker(Protocol):
    """
    Minimal MQTT-like broker client used by MQTTNotificationSink.

    Concrete implementation: paho.mqtt.client.Client
    Test implementation: FakeMessageBroker (tests/unit/test_mqtt_sink.py)
    """

    def publish(self, topic: str, payload: str, qos: int = 0, retain: bool = False) -> Any:
        """Publish payload; the returned object has ``rc == 0`` on success."""
        ...

    def connect(self, host: str, port: int, keepalive: int = 60) -> Any:
        ...

    def disconnect(self) -> Any:
        ...

    def loop_start(self) -> Any:
        """Start the background network loop."""
        ...

    def loop_stop(self) -> Any:
        ...


class NotificationSink(Protocol):
    """
    Outbound channel for top-prediction changes.

    No acknowledgment, no retry. The connection is assumed open for the
    whole session.
    """

    def send(self, serialized_message: str) -> None:
        ...


class SpeechRecognizer(Protocol):
    """
    Push-driven speech-commands recognizer.

    Concrete implementation: StreamingSpeechRecognizer (sounddevice + classifier)
    Test implementation: FakeRecognizer (tests/unit/test_session.py)
    """

    def word_labels(self) -> List[str]:
        """Label vocabulary, aligned with every score vector."""
        ...

    async def listen(self, callback: ResultCallback, options: "ListenOptions") -> None:
        """
        Open the input device and start delivering results to ``callback``.

        Returns once the stream is running. Raises DeviceUnavailableError
        if the device cannot be opened.
        """
        ...

    async def stop_listening(self) -> None:
        """Stop delivering results and release the device (awaitable teardown)."""
        ...

    def is_listening(self) -> bool:
        ...


class SpeechClassifier(Protocol):
    """
    Opaque model that scores one audio window.

    Concrete implementation: TFLiteSpeechClassifier
    """

    labels: List[str]
    """Label vocabulary"""

    window_samples: int
    """Number of samples the model expects per window"""

    def classify(self, window: "np.ndarray") -> RecognitionResult:
        ...


class ObjectDetector(Protocol):
    """
    Object detection model for the video variant.

    Concrete implementation: RoboflowObjectDetector
    Test implementation: FakeDetector (tests/unit/test_video_loop.py)
    """

    model_id: str

    def is_ready(self) -> bool:
        ...

    async def detect(self, frame: "np.ndarray") -> List["Detection"]:
        ...


class FrameSource(Protocol):
    """
    Camera-like source of BGR frames.

    Concrete implementation: CameraFrameSource (OpenCV)
    """

    def read(self) -> Optional["np.ndarray"]:
        """Current frame, or None if no frame is available."""
        ...

    def release(self) -> None:
        ...


class FramePresenter(Protocol):
    """Draws detections on a frame and shows it."""

    def present(self, frame: "np.ndarray", detections: List["Detection"]) -> None:
        ...
