"""
livesense - Live Speech and Object Detection
============================================

Classifies microphone audio (speech commands) or webcam video (objects),
renders the results, and relays speech top-prediction changes to a
notification sink.

Usage:
    # Speech (push-driven, notifies on change)
    from livesense.speech import SpeechDetector, SpeechDetectorConfig, StreamingSpeechRecognizer

    recognizer = StreamingSpeechRecognizer(load_speech_classifier("speech.tflite", "labels.txt"))
    detector = SpeechDetector(recognizer, SpeechDetectorConfig(), sink=sink)
    await detector.start(device_id="1")

    # Video (self-rescheduling, draws every box)
    from livesense.vision import VideoDetectionLoop

    loop = VideoDetectionLoop(detector, CameraFrameSource(0), presenter)
    await loop.run(model_loader=detector.load)
"""

from livesense.events import BoundingBox, Detection, Prediction, SpeechNotification

__version__ = "0.1.0"
__author__ = "Visiona Team"

__all__ = [
    "Prediction",
    "SpeechNotification",
    "Detection",
    "BoundingBox",
]
