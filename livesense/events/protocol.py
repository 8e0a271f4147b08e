"""
Topic Utilities
===============

Topic naming for notifications published to the MQTT broker.
"""


def topic_for_detection_type(detection_type: str, prefix: str = "livesense/detections") -> str:
    """
    Topic carrying notifications of one detection type.

    Examples:
        >>> topic_for_detection_type("speech")
        'livesense/detections/speech'
        >>> topic_for_detection_type("speech", prefix="lab/events/")
        'lab/events/speech'
    """
    return f"{prefix.rstrip('/')}/{detection_type}"
