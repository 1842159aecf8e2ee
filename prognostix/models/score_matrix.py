from dataclasses import dataclass

import matplotlib.pyplot as plt
import numpy as np

from prognostix.utils.errors import InvalidInputError
from prognostix.utils.typing import ProbaResult


@dataclass
class GoalMatrix:
    """Truncated grid of exact-score probabilities, rows are home goals and columns away goals.

    The grid is kept as computed: the mass beyond the largest score is the tail
    that :meth:`return_probas` redistributes.
    """

    matrix_array: np.ndarray

    def __post_init__(self):
        self.matrix_array = np.asarray(self.matrix_array, dtype=float)
        if self.matrix_array.ndim != 2 or self.matrix_array.shape[0] != self.matrix_array.shape[1]:
            raise InvalidInputError("Score matrix should be a square 2D array")
        if not np.all(np.isfinite(self.matrix_array)):
            raise InvalidInputError("Score matrix must contain only finite values")
        if np.any(self.matrix_array < 0):
            raise InvalidInputError("Score matrix must be non-negative")

    @property
    def n_goals(self) -> int:
        return self.matrix_array.shape[0]

    def total_mass(self) -> float:
        return float(self.matrix_array.sum())

    def return_probas(self) -> ProbaResult:
        """Return results probabilities in this order: home_win, draw, away_win.

        The tail mass left outside the grid is spread proportionally, so the three
        probabilities always sum to one.

        Returns:
            ProbaResult: NamedTuple of probabilities

        """
        home_win = float(np.sum(np.tril(self.matrix_array, -1)))
        draw = float(np.sum(np.diag(self.matrix_array)))
        away_win = float(np.sum(np.triu(self.matrix_array, 1)))

        s = home_win + draw + away_win
        if s <= 0:
            raise InvalidInputError("Score matrix has no probability mass")
        return ProbaResult(proba_home=home_win / s, proba_draw=draw / s, proba_away=away_win / s)

    def less_25_goals(self) -> float:
        if self.n_goals < 3:
            raise InvalidInputError("Matrix should cover at least 2 goals per side")
        low = np.add.outer(np.arange(self.n_goals), np.arange(self.n_goals)) <= 2
        return float(self.matrix_array[low].sum() / self.total_mass())

    def more_25_goals(self) -> float:
        return 1.0 - self.less_25_goals()

    def probability_both_teams_scores(self) -> float:
        return float(np.sum(self.matrix_array[1:, 1:]) / self.total_mass())

    def double_chance(self) -> tuple[float, float, float]:
        """Probabilities of Home win or Draw (1X), Draw or Away win (X2), Home or Away win (12)."""
        probas = self.return_probas()
        p_1_x = probas.proba_home + probas.proba_draw
        p_x_2 = probas.proba_draw + probas.proba_away
        p_1_2 = probas.proba_home + probas.proba_away
        return p_1_x, p_x_2, p_1_2

    def get_probable_score(self) -> tuple[int, int]:
        """Return the most probable score (home_goals, away_goals).

        Examples
        --------
        >>> gm = DixonColesModel(rho=-0.13).score_matrix(1.6, 0.9)
        >>> gm.get_probable_score()
        (1, 1)

        """
        idx = np.unravel_index(np.argmax(self.matrix_array), self.matrix_array.shape)
        return int(idx[0]), int(idx[1])

    def score_probability(self, home_goals: int, away_goals: int) -> float:
        return float(self.matrix_array[home_goals, away_goals] / self.total_mass())

    def visualize(self, n_goals: int = 5) -> None:
        if n_goals > self.n_goals:
            raise ValueError(
                f"Requested n_goals={n_goals} exceeds available goal probabilities "
                f"({self.n_goals})."
            )
        tmp_small = self.matrix_array[:n_goals, :n_goals]
        _, ax = plt.subplots()
        ax.matshow(tmp_small, cmap="coolwarm")
        for i in range(len(tmp_small)):
            for j in range(len(tmp_small)):
                ax.text(j, i, round(tmp_small[i, j], 3), ha="center", va="center", color="w")
        ax.set_xlabel("Away team")
        ax.set_ylabel("Home team")
        plt.show()

    def __str__(self) -> str:
        home, away = self.get_probable_score()
        return (
            f"Goal Matrix over 0-{self.n_goals - 1} goals, "
            f"most probable score {home}-{away}, mass {self.total_mass():.3f}."
        )
