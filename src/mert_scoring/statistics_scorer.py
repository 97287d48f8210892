"""
Scorers whose corpus statistics are the sum of sentence statistics.

For such metrics a trajectory can be rescored incrementally: switching the
candidate of one sentence only subtracts its old record from the running
totals and adds the new one, so each step costs O(number_of_scores)
regardless of corpus size.

The baseline totals are correctly rounded column sums and every step uses
compensated (Neumaier) summation, so fractional statistics do not drift
along long trajectories. Incremental scores agree with a full recompute up
to floating-point rounding; they are not guaranteed to be bit-identical.
"""

from __future__ import annotations

import math
from abc import abstractmethod
from typing import TYPE_CHECKING

import numpy as np

from mert_scoring.regularisation import RegularisationStrategy, regularise
from mert_scoring.scorer import Scorer
from mert_scoring.stats import Candidates, Diffs, ScoreData, ScoreSequence

if TYPE_CHECKING:
    from numpy.typing import NDArray

KEY_REGULARISATION_TYPE = "regtype"
KEY_REGULARISATION_WINDOW = "regwin"


def _check_candidate(data: ScoreData, sentence_index: int, candidate: int) -> None:
    size = data.num_candidates(sentence_index)
    if not 0 <= candidate < size:
        raise IndexError(
            f"Candidate index {candidate} out of range [0, {size}) for sentence {sentence_index}"
        )


def _fsum_rows(rows: list[NDArray[np.float64]], width: int) -> NDArray[np.float64]:
    """Column sums of ``rows``, each correctly rounded."""
    if not rows:
        return np.zeros(width, dtype=np.float64)
    stacked = np.vstack(rows)
    return np.array([math.fsum(column) for column in stacked.T], dtype=np.float64)


def _compensated_add(
    totals: NDArray[np.float64],
    compensation: NDArray[np.float64],
    values: NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Neumaier summation step: return ``totals + values`` and accumulate the
    lost low-order bits into ``compensation`` in place.
    """
    new_totals = totals + values
    compensation += np.where(
        np.abs(totals) >= np.abs(values),
        (totals - new_totals) + values,
        (values - new_totals) + totals,
    )
    return new_totals


class StatisticsBasedScorer(Scorer):
    """
    Scorer with additive statistics and optional trajectory regularisation.

    Recognised config keys:
        regtype: ``none`` (default), ``average`` or ``minimum``.
        regwin: Regularisation window, number of neighbours on each side
            (default 0, i.e. no smoothing).
    """

    def __init__(self, name: str, config: str = ""):
        super().__init__(name, config)
        self.regularisation_type = RegularisationStrategy.from_name(
            self.get_config(KEY_REGULARISATION_TYPE, "none")
        )
        window = self.get_config(KEY_REGULARISATION_WINDOW, "0")
        try:
            self.regularisation_window = int(window)
        except ValueError:
            raise ValueError(f"Invalid regularisation window: {window!r}") from None
        if self.regularisation_window < 0:
            raise ValueError(
                f"Regularisation window must be non-negative, got {self.regularisation_window}"
            )

    @abstractmethod
    def calculate_score(self, totals: NDArray[np.float64]) -> float:
        """Corpus score from summed statistics."""

    def score_diffs(
        self,
        candidates: Candidates,
        diffs: Diffs,
        scores: ScoreSequence | None = None,
    ) -> ScoreSequence:
        data = self._require_score_data()
        if scores is None:
            scores = []
        if len(candidates) != len(data):
            raise ValueError(
                f"Got {len(candidates)} candidates for {len(data)} sentences of score data."
            )

        rows = []
        for sentence_index, candidate in enumerate(candidates):
            _check_candidate(data, sentence_index, candidate)
            rows.append(data.matrix(sentence_index)[candidate])
        totals = _fsum_rows(rows, data.num_scores)
        compensation = np.zeros(data.num_scores, dtype=np.float64)

        raw_scores = [self.calculate_score(totals)]
        current = list(candidates)
        for sentence_index, candidate in diffs:
            if not 0 <= sentence_index < len(current):
                raise IndexError(
                    f"Diff sentence index {sentence_index} out of range [0, {len(current)})"
                )
            _check_candidate(data, sentence_index, candidate)
            matrix = data.matrix(sentence_index)
            totals = _compensated_add(totals, compensation, -matrix[current[sentence_index]])
            totals = _compensated_add(totals, compensation, matrix[candidate])
            current[sentence_index] = candidate
            raw_scores.append(self.calculate_score(totals + compensation))

        scores.extend(
            regularise(raw_scores, self.regularisation_type, self.regularisation_window)
        )
        return scores
