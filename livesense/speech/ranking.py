"""
Ranking
=======

Pure functions turning a score vector into ranked predictions.
Recomputed from scratch on every recognizer callback; nothing is cached.
"""

from typing import List, Sequence

from livesense.events.schema import UNKNOWN_PREDICTION, Prediction
from livesense.exceptions import ScoreVectorError


def zip_predictions(labels: Sequence[str], scores: Sequence[float]) -> List[Prediction]:
    """
    Pair each score with the label at the same index.

    Raises:
        ScoreVectorError: If the vectors differ in length
    """
    if len(labels) != len(scores):
        raise ScoreVectorError(expected=len(labels), actual=len(scores))
    return [Prediction.from_confidence(label, float(score)) for label, score in zip(labels, scores)]


def rank_predictions(predictions: Sequence[Prediction]) -> List[Prediction]:
    """Sort descending by score. Ties keep vocabulary order."""
    return sorted(predictions, key=lambda p: p.score, reverse=True)


def top_prediction(ranked: Sequence[Prediction]) -> Prediction:
    """First ranked entry, or the ``unknown`` sentinel for an empty batch."""
    if not ranked:
        return UNKNOWN_PREDICTION
    return ranked[0]
