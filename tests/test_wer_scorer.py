import pytest

from mert_scoring.stats import Diff, ScoreData, ScoreStats
from mert_scoring.wer_scorer import WerScorer, edit_distance


@pytest.mark.parametrize(
    "hypothesis, reference, expected",
    [
        ([], [], 0),
        ([], [1, 2], 2),
        ([1, 2], [], 2),
        ([1, 2, 3], [1, 2, 3], 0),
        ([1, 2, 3], [1, 3], 1),
        ([1], [2, 1], 1),
        ([1, 2, 3], [3, 2, 1], 2),
        ([1, 2, 3, 4], [5, 6], 4),
        (list("kitten"), list("sitting"), 3),
        (list("sunday"), list("saturday"), 3),
    ],
)
def test_edit_distance(hypothesis, reference, expected):
    assert edit_distance(hypothesis, reference) == expected


def write_references(tmp_path, *files):
    paths = []
    for i, lines in enumerate(files):
        path = tmp_path / f"ref{i}.txt"
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        paths.append(str(path))
    return paths


def test_single_reference(tmp_path):
    scorer = WerScorer()
    scorer.set_reference_files(write_references(tmp_path, ["a b c d"]))
    entry = ScoreStats()
    scorer.prepare_stats(0, "a x c", entry)
    assert list(entry) == [2, 4]
    assert scorer.calculate_score(entry.array) == pytest.approx(0.5)


def test_best_reference(tmp_path):
    scorer = WerScorer()
    scorer.set_reference_files(write_references(tmp_path, ["a b c d"], ["a x c"]))
    entry = ScoreStats()
    scorer.prepare_stats(0, "a x c", entry)
    assert list(entry) == [0, 3]


def test_average_reference(tmp_path):
    scorer = WerScorer("refchoice:average")
    scorer.set_reference_files(write_references(tmp_path, ["a b c d"], ["a x c"]))
    entry = ScoreStats()
    scorer.prepare_stats(0, "a x c", entry)
    assert list(entry) == pytest.approx([1.0, 3.5])


def test_unknown_reference_choice():
    with pytest.raises(ValueError, match="refchoice|reference choice"):
        WerScorer("refchoice:worst")


def test_reference_files_must_align(tmp_path):
    paths = write_references(tmp_path, ["a", "b"], ["a"])
    with pytest.raises(ValueError, match="differ in length"):
        WerScorer().set_reference_files(paths)


def test_needs_reference_files():
    with pytest.raises(ValueError):
        WerScorer().set_reference_files([])


def test_trajectory(tmp_path):
    scorer = WerScorer()
    scorer.set_reference_files(write_references(tmp_path, ["a b c d", "x y"]))
    nbest = [["a b c d", "a c"], ["x y", "y", "z z z"]]

    data = ScoreData(scorer.number_of_scores(), scorer.name)
    for sentence_index, hypotheses in enumerate(nbest):
        for hypothesis in hypotheses:
            entry = ScoreStats()
            scorer.prepare_stats(sentence_index, hypothesis, entry)
            data.add(entry, sentence_index)
    scorer.set_score_data(data)

    # edits: s0 -> [0, 2], s1 -> [0, 1, 3]; reference length 6
    scores = scorer.score_diffs([0, 0], [Diff(0, 1), Diff(1, 2), Diff(1, 1)])
    assert scores == pytest.approx([1.0, 4 / 6, 1 / 6, 3 / 6])
    assert scorer.score([1, 1]) == pytest.approx(3 / 6)
