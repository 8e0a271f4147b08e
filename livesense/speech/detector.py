"""
Speech Detector
===============

Audio detection loop: every recognizer result is ranked, shown on the
prediction board, and relayed to the notification sink when the top label
changes.
"""

from typing import Optional

from pydantic import ValidationError

from livesense.events.schema import SpeechNotification
from livesense.exceptions import ScoreVectorError
from livesense.interfaces import NotificationSink, RecognitionResult, SpeechRecognizer
from livesense.logging_utils import get_component_logger
from livesense.speech.board import PredictionBoard
from livesense.speech.config import SpeechDetectorConfig
from livesense.speech.ranking import rank_predictions, top_prediction, zip_predictions
from livesense.speech.session import ListeningSession
from livesense.speech.tracker import TopPredictionTracker

logger = get_component_logger(__name__, "speech_detector")


class SpeechDetector:
    """
    Push-driven detection loop for the audio variant.

    Args:
        recognizer: Speech recognizer (inference provider)
        config: SpeechDetectorConfig instance
        sink: Notification sink (None = presentation only)
        board: Prediction board updated on every result

    Example:
        >>> detector = SpeechDetector(recognizer, config, sink=MQTTNotificationSink(...))
        >>> await detector.start()
        >>> await detector.switch_device("2")
        >>> await detector.stop()
    """

    def __init__(
        self,
        recognizer: SpeechRecognizer,
        config: SpeechDetectorConfig,
        sink: Optional[NotificationSink] = None,
        board: Optional[PredictionBoard] = None,
    ):
        self.config = config
        self.sink = sink
        self.board = board or PredictionBoard()
        self.labels = recognizer.word_labels()
        self.tracker = TopPredictionTracker(notify_on_baseline=config.notify_on_baseline)
        self.session = ListeningSession(recognizer, self.on_result, config.listen)

        self.notifications_sent = 0

    async def start(self, device_id: Optional[str] = None) -> None:
        await self.session.start(device_id)

    async def stop(self) -> None:
        await self.session.stop()

    async def switch_device(self, device_id: Optional[str]) -> None:
        await self.session.switch_device(device_id)

    def on_result(self, result: RecognitionResult) -> Optional[SpeechNotification]:
        """
        Handle one recognizer result.

        Returns:
            The notification sent for this result, or None
        """
        try:
            predictions = zip_predictions(self.labels, result.scores)
        except ScoreVectorError as e:
            logger.error(str(e), extra={"event": "score_vector_mismatch"})
            return None
        except ValidationError as e:
            # scores outside [0, 1] or NaN
            logger.error(
                f"Invalid score vector: {e.error_count()} bad score(s)",
                extra={"event": "invalid_scores", "scores": list(result.scores)},
            )
            return None

        ranked = rank_predictions(predictions)
        top = top_prediction(ranked)

        try:
            self.board.update(ranked, top)
        except Exception as e:
            logger.error(
                f"Prediction board update failed: {e}",
                extra={"event": "board_update_failed", "error_type": type(e).__name__},
            )

        notification = self.tracker.observe(top)
        if notification is None:
            return None

        self._notify(notification)
        return notification

    def _notify(self, notification: SpeechNotification) -> None:
        payload = notification.to_wire()
        logger.info(
            f"Top prediction changed to {notification.class_name}",
            extra={"event": "top_changed", "label": notification.class_name, "score": notification.score},
        )

        if self.sink is None:
            return

        try:
            self.sink.send(payload)
            self.notifications_sent += 1
        except Exception as e:
            # no retry: the notification is lost, the baseline has already moved
            logger.error(
                f"Failed to send notification: {e}",
                extra={"event": "notify_failed", "error_type": type(e).__name__},
            )
