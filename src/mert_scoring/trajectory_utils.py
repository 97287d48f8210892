"""
Batch scoring of line-search trajectories.

A line search evaluates many trajectories that start from the same baseline
selection. ``Scorer.score_diffs`` only reads the attached statistics, so the
trajectories of one scorer can be scored concurrently.

Usage:
    from mert_scoring.trajectory_utils import score_trajectories, best_position

    sequences = score_trajectories(scorer, candidates, trajectories)
    for scores in sequences:
        position, value = best_position(scores)
"""

from __future__ import annotations

import os
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mert_scoring.scorer import Scorer
    from mert_scoring.stats import Candidates, Diffs, ScoreSequence


# =============================================================================
# Configuration
# =============================================================================

FALLBACK_NUM_WORKERS = 8


def num_workers_from_env(variable: str = "MERT_NUM_WORKERS") -> int:
    """
    Read a positive worker count from the environment.

    Falls back to ``FALLBACK_NUM_WORKERS`` with a warning when the value is
    not a positive integer, so a bad setting never breaks the import.
    """
    raw = os.environ.get(variable, "").strip()
    if not raw:
        return FALLBACK_NUM_WORKERS
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        warnings.warn(
            f"Ignoring {variable}={raw!r}: expected a positive integer, "
            f"using {FALLBACK_NUM_WORKERS}.",
            stacklevel=2,
        )
        return FALLBACK_NUM_WORKERS
    return value


# Default number of workers for parallel trajectory scoring
DEFAULT_NUM_WORKERS = num_workers_from_env()

# Minimum trajectories before enabling parallelism
MIN_TRAJECTORIES_FOR_PARALLEL = 4


# =============================================================================
# Trajectory scoring
# =============================================================================


def score_trajectories(
    scorer: Scorer,
    candidates: Candidates,
    trajectories: list[Diffs],
    num_workers: int = DEFAULT_NUM_WORKERS,
    min_trajectories_for_parallel: int = MIN_TRAJECTORIES_FOR_PARALLEL,
) -> list[ScoreSequence]:
    """
    Score several trajectories from the same baseline selection.

    Args:
        scorer: Scorer with score data attached
        candidates: Baseline candidate index per sentence
        trajectories: One list of diffs per trajectory
        num_workers: Number of parallel workers
        min_trajectories_for_parallel: Minimum trajectories before enabling parallelism

    Returns:
        One score sequence per trajectory, in input order
    """
    if not trajectories:
        return []

    def score_single(diffs: Diffs) -> ScoreSequence:
        return scorer.score_diffs(candidates, diffs)

    # For small batches, run sequentially
    if len(trajectories) < min_trajectories_for_parallel or num_workers <= 1:
        return [score_single(diffs) for diffs in trajectories]

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        results = list(executor.map(score_single, trajectories))

    return results


def best_position(scores: ScoreSequence) -> tuple[int, float]:
    """
    Position and value of the highest score in a sequence.

    Ties are resolved in favour of the earliest position, i.e. the shortest
    prefix of the trajectory.
    """
    if not scores:
        raise ValueError("Cannot select the best position of an empty score sequence.")
    best = 0
    for i, value in enumerate(scores):
        if value > scores[best]:
            best = i
    return best, scores[best]


__all__ = [
    "score_trajectories",
    "best_position",
    "num_workers_from_env",
    "DEFAULT_NUM_WORKERS",
    "MIN_TRAJECTORIES_FOR_PARALLEL",
]
