"""
Unit tests for MQTTNotificationSink using fake implementations

No MQTT broker required: FakeMessageBroker implements the MessageBroker
protocol (livesense/interfaces.py) and records every publish.
"""

import json
import logging
from dataclasses import dataclass
from typing import List, Tuple
from unittest.mock import MagicMock

import paho.mqtt.client as mqtt

from livesense.events import Prediction, SpeechNotification
from livesense.notify import MQTTNotificationSink, sink_from_config
from livesense.speech import SpeechDetectorConfig


# ============================================================================
# Fake Implementations
# ============================================================================


@dataclass
class FakePublishResult:
    rc: int  # 0 = success


class FakeMessageBroker:
    """Fake MQTT broker capturing published messages."""

    def __init__(self, fail_publish: bool = False):
        self.published: List[Tuple[str, str, int]] = []
        self.fail_publish = fail_publish
        self.connected = True
        self.loop_running = True

    def publish(self, topic: str, payload: str, qos: int = 0, retain: bool = False):
        self.published.append((topic, payload, qos))
        return FakePublishResult(rc=mqtt.MQTT_ERR_NO_CONN if self.fail_publish else mqtt.MQTT_ERR_SUCCESS)

    def connect(self, host: str, port: int, keepalive: int = 60) -> None:
        self.connected = True

    def disconnect(self) -> None:
        self.connected = False

    def loop_start(self) -> None:
        self.loop_running = True

    def loop_stop(self) -> None:
        self.loop_running = False


def notification_payload(label="yes", score=91.0):
    return SpeechNotification.from_prediction(Prediction(label=label, score=score)).to_wire()


# ============================================================================
# Tests
# ============================================================================


def test_send_publishes_payload_to_topic():
    broker = FakeMessageBroker()
    sink = MQTTNotificationSink(broker, "livesense/detections/speech")

    sink.send(notification_payload("yes", 91.0))

    assert len(broker.published) == 1
    topic, payload, qos = broker.published[0]
    assert topic == "livesense/detections/speech"
    assert qos == 0
    assert json.loads(payload) == {"detectionType": "speech", "className": "yes", "score": 91.0}


def test_send_uses_configured_qos():
    broker = FakeMessageBroker()
    sink = MQTTNotificationSink(broker, "t", qos=1)

    sink.send(notification_payload())

    assert broker.published[0][2] == 1


def test_publish_failure_is_logged_not_raised(caplog):
    broker = FakeMessageBroker(fail_publish=True)
    sink = MQTTNotificationSink(broker, "livesense/detections/speech")

    with caplog.at_level(logging.WARNING):
        sink.send(notification_payload())

    assert "Failed to publish" in caplog.text


def test_close_disconnects_client():
    broker = FakeMessageBroker()
    sink = MQTTNotificationSink(broker, "t")

    sink.close()

    assert not broker.connected
    assert not broker.loop_running


def test_sink_from_config_builds_topic_and_qos():
    broker = FakeMessageBroker()
    config = SpeechDetectorConfig(mqtt_topic_prefix="lab/events", mqtt_qos=2)

    sink = sink_from_config(config, client=broker)

    assert sink.topic == "lab/events/speech"
    assert sink.qos == 2
    assert sink.client is broker


def test_works_with_paho_like_client():
    client = MagicMock()
    client.publish.return_value.rc = mqtt.MQTT_ERR_SUCCESS
    sink = MQTTNotificationSink(client, "livesense/detections/speech")

    sink.send(notification_payload())

    client.publish.assert_called_once()
    assert client.publish.call_args[0][0] == "livesense/detections/speech"
    assert client.publish.call_args[1]["qos"] == 0
