"""Scoring core for minimum error rate training."""

from mert_scoring.per_scorer import PerScorer
from mert_scoring.preprocessing import FilterError, PreProcessFilter
from mert_scoring.regularisation import (
    NO_SCORE,
    RegularisationStrategy,
    score_average,
    score_min,
)
from mert_scoring.scorer import Scorer, ScoreDataNotLoadedError
from mert_scoring.scorer_factory import available_scorers, get_scorer, register_scorer
from mert_scoring.statistics_scorer import StatisticsBasedScorer
from mert_scoring.stats import Diff, ScoreArray, ScoreData, ScoreStats
from mert_scoring.vocabulary import Vocabulary
from mert_scoring.wer_scorer import WerScorer

__all__ = [
    "Diff",
    "FilterError",
    "NO_SCORE",
    "PerScorer",
    "PreProcessFilter",
    "RegularisationStrategy",
    "ScoreArray",
    "ScoreData",
    "ScoreDataNotLoadedError",
    "ScoreStats",
    "Scorer",
    "StatisticsBasedScorer",
    "Vocabulary",
    "WerScorer",
    "available_scorers",
    "get_scorer",
    "register_scorer",
    "score_average",
    "score_min",
]
