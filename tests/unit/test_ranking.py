"""
Unit tests for ranking functions

Properties checked:
- Ranked set is sorted non-increasing and is a permutation of the zipped input
- Top prediction is ranked[0], or the sentinel for an empty batch
"""

import random

import pytest

from livesense.events import UNKNOWN_PREDICTION, Prediction
from livesense.exceptions import ScoreVectorError
from livesense.speech.ranking import rank_predictions, top_prediction, zip_predictions


LABELS = ["A", "B", "C"]


class TestZipPredictions:
    def test_pairs_by_index(self):
        predictions = zip_predictions(LABELS, [0.9, 0.05, 0.05])

        assert [p.label for p in predictions] == ["A", "B", "C"]
        assert [p.score for p in predictions] == [90.0, 5.0, 5.0]

    def test_length_mismatch_raises(self):
        with pytest.raises(ScoreVectorError, match="2 entries"):
            zip_predictions(LABELS, [0.5, 0.5])

    def test_empty_vocabulary(self):
        assert zip_predictions([], []) == []


class TestRankPredictions:
    def test_sorted_descending(self):
        ranked = rank_predictions(zip_predictions(LABELS, [0.2, 0.7, 0.1]))
        assert [p.label for p in ranked] == ["B", "A", "C"]

    def test_ties_keep_vocabulary_order(self):
        ranked = rank_predictions(zip_predictions(LABELS, [0.1, 0.45, 0.45]))
        assert [p.label for p in ranked] == ["B", "C", "A"]

    def test_input_not_mutated(self):
        predictions = zip_predictions(LABELS, [0.2, 0.7, 0.1])
        rank_predictions(predictions)
        assert [p.label for p in predictions] == LABELS

    def test_sorted_permutation_for_random_vectors(self):
        rng = random.Random(7)
        labels = [f"word{i}" for i in range(20)]

        for _ in range(50):
            scores = [rng.random() for _ in labels]
            predictions = zip_predictions(labels, scores)
            ranked = rank_predictions(predictions)

            assert all(a.score >= b.score for a, b in zip(ranked, ranked[1:]))
            assert sorted(ranked, key=lambda p: p.label) == sorted(predictions, key=lambda p: p.label)


class TestTopPrediction:
    def test_first_of_ranked(self):
        ranked = rank_predictions(zip_predictions(LABELS, [0.9, 0.05, 0.05]))
        assert top_prediction(ranked) == Prediction(label="A", score=90.0)

    def test_empty_is_sentinel(self):
        assert top_prediction([]) is UNKNOWN_PREDICTION
