from __future__ import annotations

from collections import Counter

import numpy as np

from mert_scoring.statistics_scorer import StatisticsBasedScorer
from mert_scoring.stats import ScoreStats


class PerScorer(StatisticsBasedScorer):
    """
    Position-independent error rate, reported as an accuracy.

    Statistics per sentence: ``[correct, hypothesis_length, reference_length]``
    where ``correct`` is the bag-of-words overlap between hypothesis and
    reference, clipped by the reference counts.

    Score:
        (correct - max(0, hypothesis_length - reference_length)) / reference_length
    """

    def __init__(self, config: str = "", name: str = "PER"):
        super().__init__(name, config)
        self._reference_counts: list[Counter[int]] = []
        self._reference_lengths: list[int] = []

    def number_of_scores(self) -> int:
        return 3

    def set_reference_files(self, reference_files: list[str]) -> None:
        if len(reference_files) != 1:
            raise ValueError(f"PER only supports a single reference, got {len(reference_files)}.")
        self._reference_counts = []
        self._reference_lengths = []
        with open(reference_files[0], encoding="utf-8") as f:
            for line in f:
                encoded = self.tokenize_and_encode(self.preprocess_sentence(line.rstrip("\n")))
                self._reference_counts.append(Counter(encoded))
                self._reference_lengths.append(len(encoded))

    def _prepare_stats(self, sentence_index: int, text: str, entry: ScoreStats) -> None:
        if not 0 <= sentence_index < len(self._reference_lengths):
            raise IndexError(
                f"Sentence index {sentence_index} out of range, "
                f"{len(self._reference_lengths)} reference(s) loaded"
            )
        hypothesis = Counter(self.tokenize_and_encode(self.preprocess_sentence(text)))
        reference = self._reference_counts[sentence_index]
        correct = sum((hypothesis & reference).values())
        entry.set(
            [correct, sum(hypothesis.values()), self._reference_lengths[sentence_index]]
        )

    def calculate_score(self, totals: np.ndarray) -> float:
        correct, hypothesis_length, reference_length = totals
        if reference_length <= 0:
            return 0.0
        return float((correct - max(0.0, hypothesis_length - reference_length)) / reference_length)
