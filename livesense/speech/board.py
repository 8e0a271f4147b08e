"""
Prediction Board
================

Presentation state for the audio variant: the latest ranked predictions.
"""

from typing import Callable, List, Optional

from livesense.events.schema import UNKNOWN_PREDICTION, Prediction

BoardListener = Callable[["PredictionBoard"], None]


class PredictionBoard:
    """
    Holds the ranked predictions of the latest cycle.

    Every ``update`` replaces the whole batch (no accumulation) and notifies
    the listener, e.g. the CLI table printer.
    """

    def __init__(self, listener: Optional[BoardListener] = None, max_rows: int = 5):
        self.listener = listener
        self.max_rows = max_rows
        self._ranked: List[Prediction] = []
        self._top: Prediction = UNKNOWN_PREDICTION

    @property
    def ranked(self) -> List[Prediction]:
        return list(self._ranked)

    @property
    def top(self) -> Prediction:
        return self._top

    def update(self, ranked: List[Prediction], top: Prediction) -> None:
        self._ranked = list(ranked)
        self._top = top
        if self.listener is not None:
            self.listener(self)

    def rows(self) -> List[dict]:
        """Ranked ``{name, score}`` rows, limited to ``max_rows``."""
        return [{"name": p.label, "score": p.score} for p in self._ranked[: self.max_rows]]

    def format_table(self) -> str:
        lines = [f"{'#':>2}  {'label':<20} {'score':>7}"]
        for i, row in enumerate(self.rows(), start=1):
            lines.append(f"{i:>2}  {row['name']:<20} {row['score']:>6.2f}%")
        return "\n".join(lines)
