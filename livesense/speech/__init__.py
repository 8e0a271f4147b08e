"""
Speech Detection
================

Microphone speech-commands recognition with change notifications.
"""

from livesense.speech.board import PredictionBoard
from livesense.speech.config import ListenOptions, SpeechDetectorConfig
from livesense.speech.detector import SpeechDetector
from livesense.speech.recognizer import StreamingSpeechRecognizer, load_speech_classifier
from livesense.speech.session import ListeningSession, SessionState
from livesense.speech.tracker import TopPredictionTracker

__all__ = [
    "SpeechDetector",
    "SpeechDetectorConfig",
    "ListenOptions",
    "ListeningSession",
    "SessionState",
    "PredictionBoard",
    "TopPredictionTracker",
    "StreamingSpeechRecognizer",
    "load_speech_classifier",
]
