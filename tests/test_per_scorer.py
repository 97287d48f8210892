import pytest

from mert_scoring.per_scorer import PerScorer
from mert_scoring.stats import Diff, ScoreData, ScoreStats

REFERENCES = ["the cat sat on the mat", "a dog barks"]

NBEST = [
    ["the cat sat on the mat", "the cat", "a cat sat on a mat today"],
    ["a dog barks", "dog"],
]


@pytest.fixture
def reference_file(tmp_path):
    path = tmp_path / "ref.txt"
    path.write_text("\n".join(REFERENCES) + "\n", encoding="utf-8")
    return str(path)


@pytest.fixture
def scorer(reference_file):
    scorer = PerScorer()
    scorer.set_reference_files([reference_file])
    data = ScoreData(scorer.number_of_scores(), scorer.name)
    for sentence_index, hypotheses in enumerate(NBEST):
        for hypothesis in hypotheses:
            entry = ScoreStats()
            scorer.prepare_stats(sentence_index, hypothesis, entry)
            data.add(entry, sentence_index)
    scorer.set_score_data(data)
    return scorer


def test_stats(scorer):
    data = scorer.score_data
    assert list(data.get(0, 0)) == [6, 6, 6]
    assert list(data.get(0, 1)) == [2, 2, 6]
    assert list(data.get(0, 2)) == [4, 7, 6]
    assert list(data.get(1, 1)) == [1, 1, 3]


@pytest.mark.parametrize(
    "candidates, expected",
    [
        ([0, 0], 1.0),
        ([1, 0], 5 / 9),
        ([2, 1], 5 / 9),
        ([2, 0], 6 / 9),
        ([1, 1], 3 / 9),
    ],
)
def test_score(scorer, candidates, expected):
    assert scorer.score(candidates) == pytest.approx(expected)


def test_trajectory(scorer):
    scores = scorer.score_diffs([0, 0], [Diff(0, 1), Diff(1, 1), Diff(0, 2)])
    assert scores == pytest.approx([1.0, 5 / 9, 3 / 9, 5 / 9])


def test_lowercasing(tmp_path):
    path = tmp_path / "ref.txt"
    path.write_text("The Cat\n", encoding="utf-8")

    preserving = PerScorer()
    preserving.set_reference_files([str(path)])
    entry = ScoreStats()
    preserving.prepare_stats(0, "the cat", entry)
    assert list(entry) == [0, 2, 2]

    lowercasing = PerScorer("case:false")
    lowercasing.set_reference_files([str(path)])
    entry = ScoreStats()
    lowercasing.prepare_stats(0, "the cat", entry)
    assert list(entry) == [2, 2, 2]


def test_factors_apply_to_references_and_hypotheses(tmp_path):
    path = tmp_path / "ref.txt"
    path.write_text("houses|NNS|house are|VBP|be\n", encoding="utf-8")
    scorer = PerScorer()
    scorer.set_factors("2")
    scorer.set_reference_files([str(path)])
    entry = ScoreStats()
    scorer.prepare_stats(0, "house|NN|house is|VBZ|be", entry)
    assert list(entry) == [2, 2, 2]


def test_factors_cannot_change_after_references(tmp_path):
    path = tmp_path / "ref.txt"
    path.write_text("house|NN\n", encoding="utf-8")
    scorer = PerScorer()
    scorer.set_reference_files([str(path)])
    with pytest.raises(RuntimeError):
        scorer.set_factors("0")

    entry = ScoreStats()
    scorer.prepare_stats(0, "house|NN", entry)
    assert list(entry) == [1, 1, 1]


def test_string_sentence_index(scorer):
    entry = ScoreStats()
    scorer.prepare_stats("1", "a dog", entry)
    assert list(entry) == [2, 2, 3]


def test_requires_single_reference(reference_file):
    with pytest.raises(ValueError, match="single reference"):
        PerScorer().set_reference_files([reference_file, reference_file])


def test_sentence_without_reference(scorer):
    with pytest.raises(IndexError):
        scorer.prepare_stats(2, "a b", ScoreStats())


def test_empty_reference_scores_zero():
    assert PerScorer().calculate_score([0.0, 3.0, 0.0]) == 0.0
