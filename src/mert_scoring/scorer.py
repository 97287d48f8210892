"""
Base class for all evaluation metrics used in parameter tuning.

A scorer turns each candidate translation of an n-best list into a vector of
sufficient statistics (``prepare_stats``) and later computes corpus scores
from those statistics (``score`` / ``score_diffs``). Subclasses implement:

- ``number_of_scores``: width of a statistics record
- ``set_reference_files``: load references, if the metric has any
- ``_prepare_stats``: extract the statistics for one candidate
- ``score_diffs``: corpus score of a selection and of each step along a
  trajectory of single-sentence substitutions

Usage:
    scorer = get_scorer("PER", "case:false")
    scorer.set_reference_files(["ref.txt"])
    data = ScoreData(scorer.number_of_scores(), scorer.name)
    for sentence_index, hypothesis in nbest:
        entry = ScoreStats()
        scorer.prepare_stats(sentence_index, hypothesis, entry)
        data.add(entry, sentence_index)
    scorer.set_score_data(data)
    scores = scorer.score_diffs(candidates, diffs)
"""

from __future__ import annotations

import re
import warnings
from abc import ABC, abstractmethod
from collections.abc import Mapping
from types import MappingProxyType

from mert_scoring.preprocessing import (
    PreProcessFilter,
    apply_factors,
    parse_factors,
    split_tokens,
)
from mert_scoring.stats import Candidates, Diffs, ScoreData, ScoreSequence, ScoreStats
from mert_scoring.vocabulary import Vocabulary

KEY_CASE = "case"

_LEADING_INT = re.compile(r"\s*\+?(\d+)")


class ScoreDataNotLoadedError(RuntimeError):
    """Scoring was requested before any statistics store was attached."""


def parse_config(config: str) -> dict[str, str]:
    """
    Parse a ``key1:value1,key2:value2`` configuration string.

    Values may contain colons; only the first one separates key and value.
    """
    parsed = {}
    for item in config.split(","):
        if not item.strip():
            continue
        key, sep, value = item.partition(":")
        if not sep:
            raise ValueError(f"Missing colon when processing scorer config: {item!r}")
        parsed[key.strip()] = value.strip()
    return parsed


def parse_sentence_index(sentence_index: str) -> int:
    """
    Parse a sentence index the way C ``atoi`` would.

    A leading integer prefix is used and anything after it is ignored; a
    string without one becomes 0. Lossy parses emit a ``UserWarning``.
    """
    match = _LEADING_INT.match(sentence_index)
    value = int(match.group(1)) if match else 0
    if match is None or match.end() != len(sentence_index.rstrip()):
        warnings.warn(
            f"Malformed sentence index {sentence_index!r}, using {value}.",
            stacklevel=3,
        )
    return value


class Scorer(ABC):
    """
    Abstract evaluation metric.

    Args:
        name: Metric name, e.g. ``"PER"``.
        config: Metric configuration as ``key1:value1,key2:value2``.
            Unknown keys are kept and ignored.
    """

    def __init__(self, name: str, config: str = ""):
        self._name = name
        self._config: Mapping[str, str] = MappingProxyType(parse_config(config))
        self._vocab = Vocabulary()
        self._factors: list[int] = []
        self._preprocessed = False
        self._filter: PreProcessFilter | None = None
        self._score_data: ScoreData | None = None

        case = self.get_config(KEY_CASE, "true")
        if case == "true":
            self._preserve_case = True
        elif case == "false":
            self._preserve_case = False
        else:
            raise ValueError(f"Unknown case preservation value: {case!r}")

    # =========================================================================
    # Metric interface
    # =========================================================================

    @abstractmethod
    def number_of_scores(self) -> int:
        """Number of statistics needed to compute the score."""

    def set_reference_files(self, reference_files: list[str]) -> None:
        """Load references. Must be called before ``prepare_stats``."""

    def prepare_stats(self, sentence_index: int | str, text: str, entry: ScoreStats) -> None:
        """
        Compute the statistics of hypothesis ``text`` for reference sentence
        ``sentence_index`` and write them into ``entry``.

        String indices are parsed with ``parse_sentence_index``.
        """
        if isinstance(sentence_index, str):
            sentence_index = parse_sentence_index(sentence_index)
        self._prepare_stats(sentence_index, text, entry)

    def _prepare_stats(self, sentence_index: int, text: str, entry: ScoreStats) -> None:
        pass

    @abstractmethod
    def score_diffs(
        self,
        candidates: Candidates,
        diffs: Diffs,
        scores: ScoreSequence | None = None,
    ) -> ScoreSequence:
        """
        Score the selection ``candidates``, then apply each diff in turn and
        score again after every step.

        Appends ``1 + len(diffs)`` values to ``scores`` (a new list when
        omitted) and returns it.
        """

    def score(self, candidates: Candidates) -> float:
        """Corpus score when sentence ``i`` uses candidate ``candidates[i]``."""
        self._require_score_data()
        return self.score_diffs(candidates, [], [])[0]

    # =========================================================================
    # Score data
    # =========================================================================

    def set_score_data(self, data: ScoreData) -> None:
        """Attach the statistics store to score against. The store is not copied."""
        self._score_data = data

    @property
    def score_data(self) -> ScoreData | None:
        return self._score_data

    def reference_size(self) -> int:
        return len(self._score_data) if self._score_data is not None else 0

    def _require_score_data(self) -> ScoreData:
        if self._score_data is None:
            raise ScoreDataNotLoadedError("Score data not loaded.")
        return self._score_data

    # =========================================================================
    # Configuration and preprocessing
    # =========================================================================

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> Mapping[str, str]:
        return self._config

    @property
    def vocab(self) -> Vocabulary:
        return self._vocab

    @property
    def factors(self) -> list[int]:
        return list(self._factors)

    @property
    def preserve_case(self) -> bool:
        return self._preserve_case

    def get_config(self, key: str, default: str = "") -> str:
        return self._config.get(key, default)

    def set_factors(self, factors: str) -> None:
        """Select the factors of each token this metric should look at, e.g. ``"0|2"``."""
        self._require_not_preprocessed("factors")
        self._factors = parse_factors(factors)

    def set_filter(self, filter_command: str) -> None:
        """
        Preprocess sentences with an external command. An empty command
        removes the filter. Only allowed before the first sentence is
        preprocessed.
        """
        self._require_not_preprocessed("filter")
        self._filter = PreProcessFilter(filter_command) if filter_command.strip() else None

    def _require_not_preprocessed(self, what: str) -> None:
        # References and hypotheses must see the same preprocessing.
        if self._preprocessed:
            raise RuntimeError(f"Cannot change the {what} after sentences have been preprocessed.")

    def preprocess_sentence(self, sentence: str) -> str:
        """Apply the filter, then factor selection. Every scorer must call this."""
        self._preprocessed = True
        if self._filter is not None:
            sentence = self._filter(sentence)
        return apply_factors(sentence, self._factors)

    def tokenize_and_encode(self, line: str) -> list[int]:
        """Split ``line`` on whitespace and encode each token with the vocabulary."""
        tokens = split_tokens(line)
        if not self._preserve_case:
            tokens = [token.lower() for token in tokens]
        return [self._vocab.encode(token) for token in tokens]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, config={dict(self._config)!r})"
