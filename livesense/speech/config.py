"""
Speech Detector Configuration
=============================

Recognizer listen options and the speech detector configuration.
Both validate themselves in ``__post_init__``.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from livesense.exceptions import ConfigValidationError

DEFAULT_PROBABILITY_THRESHOLD = 0.75
DEFAULT_OVERLAP_FACTOR = 0.5


@dataclass
class ListenOptions:
    """Options passed to the recognizer when a listening session starts"""

    include_spectrogram: bool = False
    """Attach the model input spectrogram to every result"""

    probability_threshold: float = DEFAULT_PROBABILITY_THRESHOLD
    """Suppress results whose best score is below this value"""

    invoke_callback_on_noise_and_unknown: bool = False
    """Deliver results whose best label is background noise or unknown"""

    overlap_factor: float = DEFAULT_OVERLAP_FACTOR
    """Overlap between consecutive analysis windows (0 = none)"""

    device_id: Optional[str] = None
    """Input device (None = system default)"""

    def __post_init__(self):
        if not (0 <= self.probability_threshold <= 1):
            raise ConfigValidationError(
                f"probability_threshold must be between 0 and 1, got {self.probability_threshold}"
            )
        # overlap of 1 would never advance the window
        if not (0 <= self.overlap_factor < 1):
            raise ConfigValidationError(
                f"overlap_factor must be in [0, 1), got {self.overlap_factor}"
            )

    def with_device(self, device_id: Optional[str]) -> "ListenOptions":
        """Copy of these options bound to another input device."""
        return replace(self, device_id=device_id)


@dataclass
class SpeechDetectorConfig:
    """Configuration for the speech detection loop and its MQTT notification sink"""

    # Model
    model_path: Optional[str] = None
    """Path to the TFLite speech-commands model"""

    labels_path: Optional[str] = None
    """Path to the label vocabulary (one label per line)"""

    sample_rate: int = 16000
    """Microphone sample rate in Hz"""

    listen: ListenOptions = field(default_factory=ListenOptions)
    """Recognizer options"""

    # Change detection
    notify_on_baseline: bool = False
    """Also notify for the first top prediction (the baseline)"""

    # MQTT notification sink
    mqtt_host: str = "localhost"
    mqtt_port: int = 1883
    mqtt_topic_prefix: str = "livesense/detections"
    mqtt_qos: int = 0
    mqtt_username: Optional[str] = None
    mqtt_password: Optional[str] = None

    def __post_init__(self):
        self._validate()

    def _validate(self):
        """
        Raises:
            ConfigValidationError: If any validation fails
        """
        if not (1 <= self.mqtt_port <= 65535):
            raise ConfigValidationError(f"Invalid MQTT port: {self.mqtt_port}")

        if self.mqtt_qos not in (0, 1, 2):
            raise ConfigValidationError(f"mqtt_qos must be 0, 1 or 2, got {self.mqtt_qos}")

        if self.sample_rate <= 0:
            raise ConfigValidationError(f"sample_rate must be > 0, got {self.sample_rate}")

        if not self.mqtt_topic_prefix.strip("/"):
            raise ConfigValidationError("mqtt_topic_prefix cannot be empty")

    def to_status_dict(self) -> dict:
        """Public fields for startup logging (no credentials)."""
        return {
            "model_path": self.model_path,
            "sample_rate": self.sample_rate,
            "device_id": self.listen.device_id,
            "probability_threshold": self.listen.probability_threshold,
            "overlap_factor": self.listen.overlap_factor,
            "notify_on_baseline": self.notify_on_baseline,
            "mqtt_host": self.mqtt_host,
            "mqtt_port": self.mqtt_port,
            "mqtt_topic_prefix": self.mqtt_topic_prefix,
        }
