import pytest

from mert_scoring.regularisation import (
    NO_SCORE,
    RegularisationStrategy,
    regularise,
    score_average,
    score_min,
)


def test_score_min():
    assert score_min([5, 1, 9], 0, 3) == 1
    assert score_min([5, 1, 9], 2, 3) == 9


def test_score_min_empty_window():
    assert score_min([5, 1, 9], 1, 1) == NO_SCORE


def test_score_average():
    assert score_average([1, 2, 3, 4], 1, 3) == pytest.approx(2.5)
    assert score_average([1, 2, 3, 4], 0, 4) == pytest.approx(2.5)


@pytest.mark.parametrize("start, end", [(0, 0), (2, 2), (3, 1)])
def test_score_average_empty_window(start, end):
    assert score_average([1, 2, 3, 4], start, end) == 0.0


@pytest.mark.parametrize(
    "name, expected",
    [
        ("none", RegularisationStrategy.NONE),
        ("average", RegularisationStrategy.AVERAGE),
        ("min", RegularisationStrategy.MINIMUM),
        ("Minimum", RegularisationStrategy.MINIMUM),
    ],
)
def test_strategy_from_name(name, expected):
    assert RegularisationStrategy.from_name(name) is expected


def test_strategy_unknown():
    with pytest.raises(ValueError, match="median"):
        RegularisationStrategy.from_name("median")


class TestRegularise:
    SCORES = [4.0, 1.0, 7.0, 2.0]

    def test_none_returns_copy(self):
        result = regularise(self.SCORES, RegularisationStrategy.NONE, 2)
        assert result == self.SCORES
        assert result is not self.SCORES

    def test_zero_window_returns_copy(self):
        assert regularise(self.SCORES, RegularisationStrategy.MINIMUM, 0) == self.SCORES

    def test_minimum(self):
        assert regularise(self.SCORES, RegularisationStrategy.MINIMUM, 1) == [1.0, 1.0, 1.0, 2.0]

    def test_average(self):
        result = regularise(self.SCORES, RegularisationStrategy.AVERAGE, 1)
        assert result == pytest.approx([2.5, 4.0, 10.0 / 3, 4.5])

    def test_window_larger_than_sequence(self):
        result = regularise(self.SCORES, RegularisationStrategy.AVERAGE, 10)
        assert result == pytest.approx([3.5] * 4)

    def test_empty(self):
        assert regularise([], RegularisationStrategy.AVERAGE, 1) == []
