"""
MQTT Notification Sink
======================

Notification sink that publishes serialized speech notifications to an
MQTT broker.
"""

import logging
from typing import Optional

import paho.mqtt.client as mqtt

from livesense.events.protocol import topic_for_detection_type
from livesense.interfaces import MessageBroker

logger = logging.getLogger(__name__)


class MQTTNotificationSink:
    """
    Sink that publishes each ``send()`` payload to one MQTT topic.

    Fire-and-forget: a failed publish is logged and the message is dropped.
    Nothing is retried or acknowledged back to the caller.

    Args:
        mqtt_client: Connected MQTT client (MessageBroker protocol)
        topic: Destination topic
        qos: MQTT QoS level

    Example:
        >>> client = connect_mqtt_client("localhost", 1883)
        >>> sink = MQTTNotificationSink(client, topic_for_detection_type("speech"))
        >>> sink.send('{"detectionType": "speech", "className": "yes", "score": 91.3}')
    """

    def __init__(self, mqtt_client: MessageBroker, topic: str, qos: int = 0):
        self.client = mqtt_client
        self.topic = topic
        self.qos = qos

    def send(self, serialized_message: str) -> None:
        result = self.client.publish(self.topic, serialized_message, qos=self.qos)

        if result.rc != mqtt.MQTT_ERR_SUCCESS:
            logger.warning(
                f"Failed to publish to {self.topic}: {mqtt.error_string(result.rc)}",
                extra={"component": "mqtt_sink", "event": "publish_failed", "rc": result.rc},
            )

    def close(self):
        """Stop the network loop and disconnect the client."""
        self.client.disconnect()
        self.client.loop_stop()


def connect_mqtt_client(
    host: str,
    port: int,
    username: Optional[str] = None,
    password: Optional[str] = None,
) -> mqtt.Client:
    """Create, connect and start a paho client (background network loop)."""
    client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)

    if username:
        client.username_pw_set(username, password)

    logger.info(
        f"Connecting to MQTT broker at {host}:{port}",
        extra={"component": "mqtt_sink", "event": "mqtt_connection_start", "mqtt_host": host, "mqtt_port": port},
    )
    client.connect(host, port)
    client.loop_start()
    return client


def sink_from_config(config, client: Optional[MessageBroker] = None) -> MQTTNotificationSink:
    """
    Build the speech notification sink from a SpeechDetectorConfig.

    Connects a new paho client unless ``client`` is given.
    """
    if client is None:
        client = connect_mqtt_client(
            config.mqtt_host, config.mqtt_port, config.mqtt_username, config.mqtt_password
        )
    topic = topic_for_detection_type("speech", config.mqtt_topic_prefix)
    return MQTTNotificationSink(client, topic, qos=config.mqtt_qos)
