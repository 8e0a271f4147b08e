#!/usr/bin/env python3
"""
Notification Listener
=====================

Downstream consumer for speech notifications.
Subscribes to the detection topics and prints every top-prediction change
published by ``livesense listen``.

Usage:
    python notification_listener.py [--broker localhost] [--port 1883] [--prefix livesense/detections]
"""

import argparse
import time

import paho.mqtt.client as mqtt
from pydantic import ValidationError

from livesense.events import SpeechNotification


class NotificationListener:
    """MQTT client printing speech notifications as they arrive"""

    def __init__(self, broker_host="localhost", broker_port=1883, prefix="livesense/detections"):
        self.broker_host = broker_host
        self.broker_port = broker_port
        self.topic = f"{prefix.rstrip('/')}/#"

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id="livesense_listener")
        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message

        self.received = 0

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            print(f"Connection failed: {reason_code}")
            return
        print(f"Connected to MQTT broker at {self.broker_host}:{self.broker_port}")
        self.client.subscribe(self.topic, qos=0)
        print(f"Subscribed to {self.topic}")

    def _on_message(self, client, userdata, msg):
        try:
            notification = SpeechNotification.model_validate_json(msg.payload)
        except ValidationError as e:
            print(f"Ignoring malformed message on {msg.topic}: {e.error_count()} error(s)")
            return

        self.received += 1
        print(f"[{self.received:>4}] {notification.class_name:<20} {notification.score:6.2f}%  ({msg.topic})")

    def run(self):
        print(f"Connecting to {self.broker_host}:{self.broker_port}...")
        self.client.connect(self.broker_host, self.broker_port, keepalive=60)
        self.client.loop_start()
        try:
            while True:
                time.sleep(1)
        except KeyboardInterrupt:
            pass
        finally:
            self.client.loop_stop()
            self.client.disconnect()
            print(f"\nDisconnected ({self.received} notifications received)")


def main():
    parser = argparse.ArgumentParser(description="Print livesense speech notifications")
    parser.add_argument("--broker", default="localhost", help="MQTT broker host")
    parser.add_argument("--port", type=int, default=1883, help="MQTT broker port")
    parser.add_argument("--prefix", default="livesense/detections", help="Detection topic prefix")
    args = parser.parse_args()

    NotificationListener(args.broker, args.port, args.prefix).run()


if __name__ == "__main__":
    main()
