from __future__ import annotations

from mert_scoring.per_scorer import PerScorer
from mert_scoring.scorer import Scorer
from mert_scoring.wer_scorer import WerScorer

_SCORERS: dict[str, type[Scorer]] = {
    "PER": PerScorer,
    "WER": WerScorer,
}


def register_scorer(name: str, scorer_class: type[Scorer]) -> None:
    """
    Make ``scorer_class`` available to ``get_scorer`` under ``name``.

    The class is constructed as ``scorer_class(config, name=NAME)`` so that
    its instances report the upper-cased registered name.
    """
    _SCORERS[name.upper()] = scorer_class


def available_scorers() -> list[str]:
    return sorted(_SCORERS)


def get_scorer(type_name: str, config: str = "") -> Scorer:
    """
    Create a scorer by metric name.

    Args:
        type_name: Metric name, case-insensitive (e.g. ``"PER"``).
        config: Metric configuration as ``key1:value1,key2:value2``.
    """
    key = type_name.upper()
    scorer_class = _SCORERS.get(key)
    if scorer_class is None:
        raise ValueError(
            f"Unknown scorer type: {type_name!r} (available: {', '.join(available_scorers())})"
        )
    return scorer_class(config, name=key)
