"""
Top Prediction Tracker
======================

Change detection between consecutive top predictions.
"""

from typing import Optional

from livesense.events.schema import Prediction, SpeechNotification


class TopPredictionTracker:
    """
    Remembers the last notified top prediction and decides when to notify.

    A notification is produced iff the new top label differs from the last
    notified label. The first real top prediction sets the baseline; it is
    only notified when ``notify_on_baseline`` is set. The ``unknown``
    sentinel never sets or changes the baseline.

    Example:
        >>> tracker = TopPredictionTracker()
        >>> tracker.observe(Prediction(label="A", score=90.0)) is None
        True
        >>> tracker.observe(Prediction(label="B", score=70.0)).class_name
        'B'
    """

    def __init__(self, notify_on_baseline: bool = False):
        self.notify_on_baseline = notify_on_baseline
        self._last_notified: Optional[Prediction] = None

    @property
    def last_notified(self) -> Optional[Prediction]:
        return self._last_notified

    def observe(self, top: Prediction) -> Optional[SpeechNotification]:
        """
        Feed the current top prediction.

        Returns:
            The notification to send, or None
        """
        if top.is_unknown:
            return None

        if self._last_notified is None:
            self._last_notified = top
            if self.notify_on_baseline:
                return SpeechNotification.from_prediction(top)
            return None

        if top.label != self._last_notified.label:
            self._last_notified = top
            return SpeechNotification.from_prediction(top)

        return None
