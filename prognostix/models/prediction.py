import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

from prognostix.calibration import CalibrationEngine
from prognostix.config import (
    DEFAULT_EXPECTED_GOALS,
    DEFAULT_WEIGHTS,
    ExpectedGoalsConfig,
    WeightConfig,
)
from prognostix.data_io.records import (
    CalibrationParameters,
    MatchObservation,
    PredictionResult,
    TeamStats,
)
from prognostix.models.dixon_coles import DixonColesModel
from prognostix.models.expected_goals import ExpectedGoalsModel
from prognostix.models.score_model import power_score
from prognostix.utils.errors import InvalidInputError

logger = logging.getLogger(name=__name__)

__all__ = ["PredictionEngine", "round_half_up"]


def round_half_up(value: float, ndigits: int = 2) -> float:
    """Round ``value`` to ``ndigits`` decimals, ties away from zero. Numpy scalars are accepted."""
    quantum = Decimal(1).scaleb(-ndigits)
    return float(Decimal(repr(float(value))).quantize(quantum, rounding=ROUND_HALF_UP))


def _split_percent(home: float, draw: float) -> tuple[float, float, float]:
    """Round home and draw, the away side takes the remainder so the total is exactly 100."""
    home_r = round_half_up(home)
    draw_r = round_half_up(draw)
    away_r = round_half_up(100.0 - home_r - draw_r)
    return home_r, draw_r, max(0.0, away_r)


class PredictionEngine:
    """Produce :class:`PredictionResult` from two team profiles.

    Two methods are available:

    - :meth:`calculate_match_prediction` splits the win probabilities in
      proportion to the power scores after reserving a fixed draw probability.
    - :meth:`predict_scoreline` derives Poisson goal rates from the statistics
      and sums a Dixon-Coles score grid.

    When calibration parameters are given, each of the three probabilities is
    remapped through :meth:`CalibrationEngine.calibrate` and the triple is
    renormalised to 100.
    """

    def __init__(
        self,
        weights: WeightConfig = DEFAULT_WEIGHTS,
        expected_goals: ExpectedGoalsConfig = DEFAULT_EXPECTED_GOALS,
        calibration: CalibrationParameters | None = None,
    ) -> None:
        self.weights = weights
        self.expected_goals_config = expected_goals
        self.calibration = calibration
        self._xg_model = ExpectedGoalsModel(expected_goals)
        self._scoreline_model = DixonColesModel(
            rho=expected_goals.rho, max_goals=expected_goals.max_goals
        )

    def _finalize(self, home: float, draw: float, away: float) -> tuple[float, float, float]:
        """Percent triple, optionally calibrated, rounded, summing to 100."""
        probas = (home, draw, away)
        if any(not math.isfinite(p) or p < 0 for p in probas):
            raise InvalidInputError(f"Malformed probabilities {probas}.")
        if self.calibration is not None:
            probas = tuple(
                CalibrationEngine.calibrate(p, self.calibration.a, self.calibration.b)
                for p in probas
            )
        total = sum(probas)
        if total <= 0:
            raise InvalidInputError("Probabilities have no mass.")
        home, draw, _ = (100.0 * p / total for p in probas)
        return _split_percent(home, draw)

    def calculate_match_prediction(
        self, home_stats: TeamStats, away_stats: TeamStats
    ) -> PredictionResult:
        """Win/draw/loss probabilities (percent) from the two power scores.

        Raises:
            InvalidInputError: If a profile breaks the count invariants, or if the
                scores cannot be read as proportions (a negative score or a null sum).

        """
        home_stats.validate()
        away_stats.validate()
        home_score = power_score(home_stats, True, self.weights)
        away_score = power_score(away_stats, False, self.weights)
        total = home_score + away_score
        if total == 0 or home_score < 0 or away_score < 0:
            raise InvalidInputError(
                f"Power scores {home_score:.2f} / {away_score:.2f} are not representable as a proportion."
            )

        win_share = (100.0 - self.weights.draw_probability) / 100.0
        home_prob = home_score / total * 100.0 * win_share
        away_prob = away_score / total * 100.0 * win_share
        home_prob, draw_prob, away_prob = self._finalize(
            home_prob, self.weights.draw_probability, away_prob
        )
        return PredictionResult(
            home_win_probability=home_prob,
            draw_probability=draw_prob,
            away_win_probability=away_prob,
            home_power_score=round_half_up(home_score),
            away_power_score=round_half_up(away_score),
        )

    def predict_scoreline(
        self,
        home_stats: TeamStats,
        away_stats: TeamStats,
        league_average: float | None = None,
        *,
        home_team: str | None = None,
        away_team: str | None = None,
        head_to_head: Sequence[MatchObservation] = (),
        home_recent: Sequence[MatchObservation] = (),
        away_recent: Sequence[MatchObservation] = (),
        ratings: Mapping[str, int] | None = None,
    ) -> PredictionResult:
        """Probabilities and goal markets from a Dixon-Coles score grid.

        Args:
            home_stats: Home team profile (venue fields describe home matches).
            away_stats: Away team profile.
            league_average: Goals per team per match in the league; the weight
                configuration default is used when omitted.
            home_team: Home team identifier, needed for head-to-head and ratings.
            away_team: Away team identifier.
            head_to_head: Previous meetings, most recent first.
            home_recent: Latest matches of the home team, their detail statistics
                feed the tactical bonus.
            away_recent: Latest matches of the away team.
            ratings: Elo ratings by team identifier.

        Returns:
            PredictionResult: 1X2 probabilities plus expected goals, over/under 2.5,
            both teams to score, double chances and the most probable score.

        Raises:
            InvalidInputError: If a profile breaks the count invariants or the
                league average is not positive.

        """
        home_stats.validate()
        away_stats.validate()
        if league_average is None:
            league_average = self.weights.league_average_goals
        if league_average <= 0:
            raise InvalidInputError("league_average must be positive.")

        rates = self._xg_model.expected_goals(
            home_stats,
            away_stats,
            league_average,
            home_team=home_team,
            away_team=away_team,
            head_to_head=head_to_head,
            home_recent=home_recent,
            away_recent=away_recent,
            ratings=ratings,
        )
        matrix = self._scoreline_model.score_matrix(rates.home, rates.away)
        probas = matrix.return_probas()
        home_prob, draw_prob, away_prob = self._finalize(
            probas.proba_home * 100.0, probas.proba_draw * 100.0, probas.proba_away * 100.0
        )
        over = matrix.more_25_goals() * 100.0
        exact = matrix.get_probable_score()

        return PredictionResult(
            home_win_probability=home_prob,
            draw_probability=draw_prob,
            away_win_probability=away_prob,
            home_power_score=round_half_up(power_score(home_stats, True, self.weights)),
            away_power_score=round_half_up(power_score(away_stats, False, self.weights)),
            predicted_home_goals=round_half_up(rates.home),
            predicted_away_goals=round_half_up(rates.away),
            over_2_5=round_half_up(over),
            under_2_5=round_half_up(100.0 - over),
            btts=round_half_up(matrix.probability_both_teams_scores() * 100.0),
            double_chance_1x=round_half_up(home_prob + draw_prob),
            double_chance_x2=round_half_up(draw_prob + away_prob),
            double_chance_12=round_half_up(home_prob + away_prob),
            exact_score=exact,
            exact_score_probability=round_half_up(matrix.score_probability(*exact) * 100.0),
        )
