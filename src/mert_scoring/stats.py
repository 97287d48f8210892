"""
Sufficient statistics containers.

A scorer turns every (sentence, candidate) pair of an n-best list into a
fixed-width vector of statistics (``ScoreStats``). The vectors for one
sentence live in a ``ScoreArray`` indexed by candidate id, and the whole
corpus is a ``ScoreData`` indexed by sentence.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class Diff(NamedTuple):
    """Switch the selected candidate of one sentence."""

    sentence_index: int
    candidate_index: int


Candidates = list[int]
Diffs = list[Diff]
ScoreSequence = list[float]


def _check_index(index: int, size: int, what: str) -> None:
    if not 0 <= index < size:
        raise IndexError(f"{what} index {index} out of range [0, {size})")


class ScoreStats:
    """Statistics record for a single candidate translation.

    The record is written once with ``set`` and is read-only afterwards.
    """

    def __init__(self, values: Iterable[float] | None = None):
        self._array: NDArray[np.float64] | None = None
        if values is not None:
            self.set(values)

    def set(self, values: Iterable[float]) -> None:
        if self._array is not None:
            raise ValueError("Statistics record is already set.")
        array = np.array(list(values), dtype=np.float64)
        if array.ndim != 1:
            raise ValueError(f"Statistics must be one-dimensional, got shape {array.shape}.")
        array.flags.writeable = False
        self._array = array

    @property
    def is_set(self) -> bool:
        return self._array is not None

    @property
    def array(self) -> NDArray[np.float64]:
        if self._array is None:
            raise ValueError("Statistics record has not been set.")
        return self._array

    @property
    def size(self) -> int:
        return 0 if self._array is None else len(self._array)

    def __len__(self) -> int:
        return self.size

    def __iter__(self) -> Iterator[float]:
        return iter(self.array.tolist())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScoreStats):
            return NotImplemented
        if self._array is None or other._array is None:
            return self._array is other._array
        return bool(np.array_equal(self._array, other._array))

    def __repr__(self) -> str:
        values = "unset" if self._array is None else " ".join(f"{v:g}" for v in self._array)
        return f"ScoreStats({values})"


class ScoreArray:
    """Statistics of every candidate considered for one sentence."""

    def __init__(self, sentence_index: int):
        self.sentence_index = sentence_index
        self._stats: list[ScoreStats] = []

    def add(self, stats: ScoreStats) -> None:
        self._stats.append(stats)

    def get(self, candidate: int) -> ScoreStats:
        _check_index(candidate, len(self._stats), "Candidate")
        return self._stats[candidate]

    def __len__(self) -> int:
        return len(self._stats)

    def __getitem__(self, candidate: int) -> ScoreStats:
        return self.get(candidate)

    def __iter__(self) -> Iterator[ScoreStats]:
        return iter(self._stats)


class ScoreData:
    """
    Corpus statistics store: one ``ScoreArray`` per reference sentence.

    Args:
        num_scores: Width of every record, i.e. the owning scorer's
            ``number_of_scores()``.
        name: Optional name of the scorer that produced the records.
    """

    def __init__(self, num_scores: int, name: str = ""):
        if num_scores < 0:
            raise ValueError(f"num_scores must be non-negative, got {num_scores}.")
        self.num_scores = num_scores
        self.name = name
        self._arrays: list[ScoreArray] = []
        self._matrices: dict[int, NDArray[np.float64]] = {}

    def add(self, stats: ScoreStats, sentence_index: int) -> None:
        """Append the statistics of the next candidate of ``sentence_index``."""
        if sentence_index < 0:
            raise IndexError(f"Sentence index must be non-negative, got {sentence_index}.")
        if not stats.is_set:
            raise ValueError("Cannot add an unset statistics record.")
        if stats.size != self.num_scores:
            raise ValueError(
                f"Statistics record has {stats.size} values, expected {self.num_scores}."
            )
        while len(self._arrays) <= sentence_index:
            self._arrays.append(ScoreArray(len(self._arrays)))
        self._arrays[sentence_index].add(stats)
        self._matrices.pop(sentence_index, None)

    def get(self, sentence_index: int, candidate: int | None = None) -> ScoreArray | ScoreStats:
        _check_index(sentence_index, len(self._arrays), "Sentence")
        array = self._arrays[sentence_index]
        if candidate is None:
            return array
        return array.get(candidate)

    def num_candidates(self, sentence_index: int) -> int:
        _check_index(sentence_index, len(self._arrays), "Sentence")
        return len(self._arrays[sentence_index])

    def matrix(self, sentence_index: int) -> NDArray[np.float64]:
        """Records of one sentence stacked as a (candidates, num_scores) array."""
        _check_index(sentence_index, len(self._arrays), "Sentence")
        cached = self._matrices.get(sentence_index)
        if cached is None:
            array = self._arrays[sentence_index]
            if len(array) == 0:
                cached = np.zeros((0, self.num_scores), dtype=np.float64)
            else:
                cached = np.vstack([stats.array for stats in array])
            cached.flags.writeable = False
            self._matrices[sentence_index] = cached
        return cached

    def __len__(self) -> int:
        return len(self._arrays)

    def __iter__(self) -> Iterator[ScoreArray]:
        return iter(self._arrays)
