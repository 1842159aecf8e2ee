import math

import numpy as np
import pytest

from prognostix.models.dixon_coles import DixonColesModel, poisson_pmf, scoreline_probability, tau
from prognostix.models.score_matrix import GoalMatrix
from prognostix.utils.errors import InvalidInputError


class TestPoissonPmf:
    def test_matches_closed_form(self):
        assert poisson_pmf(2, 1.5) == pytest.approx(math.exp(-1.5) * 1.5**2 / 2)

    @pytest.mark.parametrize("rate", [0.0, -0.4])
    def test_degenerate_rate(self, rate):
        assert poisson_pmf(0, rate) == 1.0
        assert poisson_pmf(3, rate) == 0.0

    def test_negative_goals_raise(self):
        with pytest.raises(InvalidInputError):
            poisson_pmf(-1, 1.0)


class TestTau:
    def test_low_score_cells(self):
        assert tau(0, 0, 1.2, 0.8, -0.1) == pytest.approx(1 + 1.2 * 0.8 * 0.1)
        assert tau(0, 1, 1.2, 0.8, -0.1) == pytest.approx(1 - 1.2 * 0.1)
        assert tau(1, 0, 1.2, 0.8, -0.1) == pytest.approx(1 - 0.8 * 0.1)
        assert tau(1, 1, 1.2, 0.8, -0.1) == pytest.approx(1.1)

    def test_other_cells_untouched(self):
        assert tau(2, 1, 1.2, 0.8, -0.1) == 1.0


class TestScorelineProbability:
    def test_clamped_at_zero(self):
        # tau(0, 0) = 1 - 1.5 * 1.5 * 2 < 0
        assert scoreline_probability(0, 0, 1.5, 1.5, 2.0) == 0.0

    @pytest.mark.parametrize("rho", [-0.3, -0.13, 0.0, 0.2, 1.5])
    def test_never_negative(self, rho):
        for x in range(4):
            for y in range(4):
                assert scoreline_probability(x, y, 1.7, 0.9, rho) >= 0.0

    def test_grid_mass_close_to_one(self):
        total = sum(
            scoreline_probability(x, y, 1.4, 1.1, -0.13) for x in range(20) for y in range(20)
        )
        assert total == pytest.approx(1.0, abs=1e-6)

    def test_zero_home_rate(self):
        assert scoreline_probability(0, 0, 0.0, 1.0, -0.13) == pytest.approx(math.exp(-1.0))
        assert scoreline_probability(1, 0, 0.0, 1.0, -0.13) == 0.0


class TestDixonColesModel:
    def test_score_matrix_shape(self):
        gm = DixonColesModel(rho=-0.13, max_goals=7).score_matrix(1.6, 0.9)
        assert isinstance(gm, GoalMatrix)
        assert gm.matrix_array.shape == (8, 8)
        assert gm.total_mass() == pytest.approx(1.0, abs=2e-3)

    def test_stronger_home_side_is_favourite(self):
        probas = DixonColesModel().score_matrix(2.2, 0.7).return_probas()
        assert probas.proba_home > probas.proba_draw > 0
        assert probas.proba_home > probas.proba_away
        assert np.isclose(sum(probas), 1.0)

    def test_invalid_arguments(self):
        with pytest.raises(InvalidInputError):
            DixonColesModel(max_goals=1)
        with pytest.raises(InvalidInputError):
            DixonColesModel(rho=float("nan"))
