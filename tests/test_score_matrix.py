import math

import numpy as np
import pytest

from prognostix.models.dixon_coles import DixonColesModel
from prognostix.models.score_matrix import GoalMatrix
from prognostix.utils.typing import ProbaResult


@pytest.fixture
def goal_matrix():
    return GoalMatrix(
        np.array(
            [
                [0.10, 0.10, 0.05],
                [0.20, 0.10, 0.05],
                [0.20, 0.10, 0.10],
            ]
        )
    )


class TestGoalMatrixInitialization:
    """Tests for GoalMatrix initialization and validation."""

    def test_initialization_converts_to_array(self):
        """Test that a nested list is converted to a float array."""
        gm = GoalMatrix([[0.5, 0.5], [0.0, 0.0]])
        assert isinstance(gm.matrix_array, np.ndarray)
        assert gm.n_goals == 2

    def test_non_square_raise(self):
        """Test that a rectangular grid is rejected."""
        with pytest.raises(ValueError, match="square"):
            GoalMatrix(np.zeros((2, 3)))

    def test_negative_probabilities_raise(self):
        """Test that negative probabilities are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            GoalMatrix(np.array([[0.5, -0.1], [0.3, 0.3]]))

    def test_nan_probabilities_raise(self):
        """Test that NaN values are rejected."""
        with pytest.raises(ValueError, match="finite"):
            GoalMatrix(np.array([[np.nan, 0.1], [0.3, 0.3]]))


class TestReturnProbas:
    """Tests for return_probas method."""

    def test_return_probas_basic(self, goal_matrix):
        """Test the split between the lower triangle, the diagonal and the upper triangle."""
        result = goal_matrix.return_probas()

        assert isinstance(result, ProbaResult)
        assert result.proba_home == pytest.approx(0.5)
        assert result.proba_draw == pytest.approx(0.3)
        assert result.proba_away == pytest.approx(0.2)

    def test_return_probas_renormalises_truncated_grid(self):
        """Test that missing tail mass is spread over the three outcomes."""
        result = GoalMatrix(np.array([[0.2, 0.1], [0.1, 0.0]])).return_probas()
        assert math.isclose(result.proba_home + result.proba_draw + result.proba_away, 1.0)
        assert result.proba_draw == pytest.approx(0.5)

    def test_zero_mass_raise(self):
        with pytest.raises(ValueError):
            GoalMatrix(np.zeros((3, 3))).return_probas()


class TestMarkets:
    def test_less_more_25(self, goal_matrix):
        assert goal_matrix.less_25_goals() == pytest.approx(0.75)
        assert goal_matrix.more_25_goals() == pytest.approx(0.25)

    def test_less_25_needs_three_goals(self):
        with pytest.raises(ValueError):
            GoalMatrix(np.full((2, 2), 0.25)).less_25_goals()

    def test_both_teams_score(self, goal_matrix):
        assert goal_matrix.probability_both_teams_scores() == pytest.approx(0.35)

    def test_double_chance(self, goal_matrix):
        p_1x, p_x2, p_12 = goal_matrix.double_chance()
        assert p_1x == pytest.approx(0.8)
        assert p_x2 == pytest.approx(0.5)
        assert p_12 == pytest.approx(0.7)

    def test_probable_score(self, goal_matrix):
        assert goal_matrix.get_probable_score() == (1, 0)
        assert goal_matrix.score_probability(1, 0) == pytest.approx(0.2)

    def test_probable_score_dixon_coles(self):
        gm = DixonColesModel(rho=-0.13).score_matrix(1.6, 0.9)
        assert gm.get_probable_score() == (1, 1)

    def test_str(self, goal_matrix):
        assert "most probable score 1-0" in str(goal_matrix)
