from __future__ import annotations

import math

import numpy as np

from mert_scoring.statistics_scorer import StatisticsBasedScorer
from mert_scoring.stats import ScoreStats

KEY_REFERENCE_CHOICE = "refchoice"

REFERENCE_CHOICES = ("best", "average")


def edit_distance(hypothesis: list[int], reference: list[int]) -> int:
    """
    Word-level Levenshtein distance with unit costs.

    Rows of the DP table are computed with NumPy. Insertions within a row are
    resolved with a running minimum: ``row[j] = j + min(row[k] - k for k <= j)``.
    """
    if not reference:
        return len(hypothesis)
    if not hypothesis:
        return len(reference)

    ref = np.asarray(reference)
    offsets = np.arange(len(reference) + 1)
    previous = offsets.copy()
    for i, token in enumerate(hypothesis, start=1):
        row = np.empty_like(previous)
        row[0] = i
        # substitution/match vs. deletion of the hypothesis token
        row[1:] = np.minimum(previous[:-1] + (ref != token), previous[1:] + 1)
        previous = np.minimum.accumulate(row - offsets) + offsets
    return int(previous[-1])


def _error_rate(edits: float, reference_length: float) -> float:
    if reference_length > 0:
        return edits / reference_length
    return math.inf if edits > 0 else 0.0


class WerScorer(StatisticsBasedScorer):
    """
    Word error rate, reported as ``1 - WER`` so that higher is better.

    Statistics per sentence: ``[edits, reference_length]``.

    With several reference files the ``refchoice`` config key decides how the
    references of a sentence are combined:
        best: statistics of the reference with the lowest error rate (default)
        average: mean edits and mean reference length over all references
    """

    def __init__(self, config: str = "", name: str = "WER"):
        super().__init__(name, config)
        self.reference_choice = self.get_config(KEY_REFERENCE_CHOICE, "best")
        if self.reference_choice not in REFERENCE_CHOICES:
            raise ValueError(
                f"Unknown reference choice: {self.reference_choice!r} "
                f"(expected one of {', '.join(REFERENCE_CHOICES)})"
            )
        self._references: list[list[list[int]]] = []

    def number_of_scores(self) -> int:
        return 2

    def set_reference_files(self, reference_files: list[str]) -> None:
        if not reference_files:
            raise ValueError("WER needs at least one reference file.")

        per_file: list[list[list[int]]] = []
        for path in reference_files:
            with open(path, encoding="utf-8") as f:
                lines = [self.preprocess_sentence(line.rstrip("\n")) for line in f]
            per_file.append([self.tokenize_and_encode(line) for line in lines])

        line_counts = {len(lines) for lines in per_file}
        if len(line_counts) != 1:
            raise ValueError(
                f"Reference files differ in length: {[len(lines) for lines in per_file]}"
            )
        self._references = [list(refs) for refs in zip(*per_file)]

    def _prepare_stats(self, sentence_index: int, text: str, entry: ScoreStats) -> None:
        if not 0 <= sentence_index < len(self._references):
            raise IndexError(
                f"Sentence index {sentence_index} out of range, "
                f"{len(self._references)} reference(s) loaded"
            )
        hypothesis = self.tokenize_and_encode(self.preprocess_sentence(text))
        per_reference = [
            (edit_distance(hypothesis, ref), len(ref)) for ref in self._references[sentence_index]
        ]

        if self.reference_choice == "average":
            edits = sum(e for e, _ in per_reference) / len(per_reference)
            length = sum(n for _, n in per_reference) / len(per_reference)
        else:
            edits, length = min(per_reference, key=lambda c: _error_rate(*c))
        entry.set([edits, length])

    def calculate_score(self, totals: np.ndarray) -> float:
        edits, reference_length = totals
        if reference_length <= 0:
            return 0.0
        return float(1.0 - edits / reference_length)
