from typing import NamedTuple

import numpy as np

ArrayLikeF = list[float] | np.ndarray


class ProbaResult(NamedTuple):
    """Named tuple for Probabilities."""

    proba_home: float
    proba_draw: float
    proba_away: float


class GoalExpectation(NamedTuple):
    """Expected goals of the home side (lambda) and the away side (mu)."""

    home: float
    away: float
