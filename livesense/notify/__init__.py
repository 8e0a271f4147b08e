"""
Notification Sinks
==================

Outbound channels for top-prediction changes.
"""

from livesense.notify.mqtt_sink import MQTTNotificationSink, connect_mqtt_client, sink_from_config

__all__ = [
    "MQTTNotificationSink",
    "connect_mqtt_client",
    "sink_from_config",
]
