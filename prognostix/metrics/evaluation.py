import logging

from prognostix.data_io.records import AWAY, DRAW, HOME, PredictionResult
from prognostix.metrics.metrics_function import brier_score
from prognostix.utils.errors import InvalidInputError

logger = logging.getLogger(name=__name__)

WIN_THRESHOLD = 40.0
DRAW_THRESHOLD = 30.0


def actual_outcome(home_goals: int, away_goals: int) -> int:
    if home_goals < 0 or away_goals < 0:
        raise InvalidInputError("Goal counts must be non-negative.")
    if home_goals > away_goals:
        return HOME
    if home_goals < away_goals:
        return AWAY
    return DRAW


def is_prediction_correct(prediction: PredictionResult, outcome_idx: int) -> bool:
    """Whether the forecast backed the observed outcome.

    The outcome counts as called when it holds the largest probability, or when
    its probability reaches 40% for a win and 30% for a draw.
    """
    percents = (
        prediction.home_win_probability,
        prediction.draw_probability,
        prediction.away_win_probability,
    )
    observed = percents[outcome_idx]
    if observed == max(percents):
        return True
    threshold = DRAW_THRESHOLD if outcome_idx == DRAW else WIN_THRESHOLD
    return observed >= threshold


def evaluate_prediction(
    prediction: PredictionResult, home_goals: int, away_goals: int
) -> PredictionResult:
    """Fill the Brier score and the correctness flag of a prediction once the match is played.

    Args:
        prediction: The forecast issued before the match.
        home_goals: Final home score.
        away_goals: Final away score.

    Returns:
        PredictionResult: the same object, evaluated.

    Raises:
        InvalidInputError: If the prediction was already evaluated or a score is negative.

    """
    if prediction.is_evaluated:
        raise InvalidInputError("Prediction has already been evaluated.")
    outcome_idx = actual_outcome(home_goals, away_goals)
    prediction.brier_score = round(brier_score(prediction.probabilities, outcome_idx), 3)
    prediction.prediction_correct = is_prediction_correct(prediction, outcome_idx)
    logger.debug(
        "Evaluated %d-%d: brier=%.3f correct=%s",
        home_goals,
        away_goals,
        prediction.brier_score,
        prediction.prediction_correct,
    )
    return prediction
