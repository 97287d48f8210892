"""
Regularisation strategies for score sequences.

A statistics-based scorer can smooth the scores along a trajectory by
replacing each position with the minimum or the average of the scores in a
window around it.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from enum import Enum

# Returned by score_min for an empty window. Callers must treat it as "unset".
NO_SCORE = sys.float_info.max


class RegularisationStrategy(Enum):
    NONE = "none"
    AVERAGE = "average"
    MINIMUM = "minimum"

    @classmethod
    def from_name(cls, name: str) -> RegularisationStrategy:
        key = name.strip().lower()
        if key == "min":
            key = "minimum"
        for strategy in cls:
            if strategy.value == key:
                return strategy
        raise ValueError(
            f"Unknown regularisation type: {name!r} (expected none, average or minimum)"
        )


def score_min(scores: Sequence[float], start: int, end: int) -> float:
    """
    Minimum of ``scores[start:end]``.

    Returns:
        The smallest score in the window, or ``NO_SCORE`` if it is empty.
    """
    minimum = NO_SCORE
    for i in range(start, end):
        if scores[i] < minimum:
            minimum = scores[i]
    return minimum


def score_average(scores: Sequence[float], start: int, end: int) -> float:
    """
    Arithmetic mean of ``scores[start:end]``.

    Returns:
        The mean score in the window, or 0.0 if it is empty.
    """
    if end - start < 1:
        return 0.0
    total = 0.0
    for i in range(start, end):
        total += scores[i]
    return total / (end - start)


def regularise(
    scores: Sequence[float],
    strategy: RegularisationStrategy,
    window: int,
) -> list[float]:
    """
    Smooth a score sequence over a sliding window.

    Position ``i`` is replaced by the combined value of
    ``scores[max(0, i - window) : i + window + 1]``.

    Args:
        scores: Raw scores in trajectory order.
        strategy: How to combine a window.
        window: Number of neighbours on each side.

    Returns:
        A new list of the same length as ``scores``.
    """
    if strategy is RegularisationStrategy.NONE or window <= 0:
        return list(scores)

    combine = score_average if strategy is RegularisationStrategy.AVERAGE else score_min
    size = len(scores)
    return [
        combine(scores, max(0, i - window), min(size, i + window + 1)) for i in range(size)
    ]
