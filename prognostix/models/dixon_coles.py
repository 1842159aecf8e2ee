"""Dixon-Coles scoreline probabilities.

The model multiplies two independent Poisson probabilities by a correction
factor ``tau`` that only touches the four low-score cells (0-0, 0-1, 1-0, 1-1),
where goals of both sides are known to be dependent.
"""

import logging
import math

import numpy as np
import scipy.stats as stats

from prognostix.models.score_matrix import GoalMatrix
from prognostix.utils.errors import InvalidInputError

logger = logging.getLogger(name=__name__)

__all__ = ["poisson_pmf", "tau", "scoreline_probability", "DixonColesModel"]


def poisson_pmf(k: int, lambda_param: float) -> float:
    """Poisson probability of exactly ``k`` goals for a rate ``lambda_param``.

    A non-positive rate is a team that never scores: probability one for zero
    goals, zero otherwise.
    """
    if k < 0:
        raise InvalidInputError(f"Goal count must be non-negative, got {k}.")
    if lambda_param <= 0:
        return 1.0 if k == 0 else 0.0
    return float(stats.poisson.pmf(k, lambda_param))


def tau(x: int, y: int, lambda_param: float, mu: float, rho: float) -> float:
    if x == 0 and y == 0:
        return 1.0 - lambda_param * mu * rho
    if x == 0 and y == 1:
        return 1.0 + lambda_param * rho
    if x == 1 and y == 0:
        return 1.0 + mu * rho
    if x == 1 and y == 1:
        return 1.0 - rho
    return 1.0


def scoreline_probability(x: int, y: int, lambda_param: float, mu: float, rho: float) -> float:
    """Probability of the exact score ``x``-``y``.

    Args:
        x: Home goals.
        y: Away goals.
        lambda_param: Expected home goals.
        mu: Expected away goals.
        rho: Low-score dependence parameter (typically around -0.13).

    Returns:
        float: The probability, clamped at zero since ``tau`` can turn negative
        for extreme rho/rate combinations.

    """
    base = poisson_pmf(x, lambda_param) * poisson_pmf(y, mu)
    return max(0.0, base * tau(x, y, lambda_param, mu, rho))


class DixonColesModel:
    """Scoreline grid builder for a fixed low-score dependence ``rho``."""

    def __init__(self, rho: float = -0.13, max_goals: int = 7) -> None:
        if max_goals < 2:
            raise InvalidInputError("max_goals must be at least 2.")
        if not math.isfinite(rho):
            raise InvalidInputError("rho must be finite.")
        self.rho = rho
        self.max_goals = max_goals

    def score_matrix(self, lambda_param: float, mu: float) -> GoalMatrix:
        """Probabilities of every score from 0-0 to ``max_goals``-``max_goals``."""
        n = self.max_goals + 1
        grid = np.array(
            [
                [scoreline_probability(x, y, lambda_param, mu, self.rho) for y in range(n)]
                for x in range(n)
            ]
        )
        logger.debug(
            "Score grid for lambda=%.3f mu=%.3f covers %.4f of the mass",
            lambda_param,
            mu,
            grid.sum(),
        )
        return GoalMatrix(grid)
