import numpy as np

from prognostix.utils.errors import InvalidInputError
from prognostix.utils.typing import ArrayLikeF

LOG_FLOOR = 1e-15


def _check(probas: ArrayLikeF, outcome_idx: int) -> np.ndarray:
    array = np.asarray(probas, dtype=float)
    if array.shape != (3,):
        raise InvalidInputError(f"Expected three probabilities, got shape {array.shape}.")
    if outcome_idx not in (0, 1, 2):
        raise InvalidInputError(f"outcome_idx must be 0, 1 or 2, got {outcome_idx}.")
    return array


def brier_score(probas: ArrayLikeF, outcome_idx: int) -> float:
    """Compute the Brier score of a 1X2 forecast.

    Args:
        probas ArrayLike float: probabilities (fractions of one) of Home, Draw and Away
        outcome_idx (int): index of the outcome, can be 0, 1, 2 for Home, Draw and Away

    Returns:
        float: mean of the three squared errors, 0 is a perfect forecast

    """
    array = _check(probas, outcome_idx)
    outcome = np.zeros(3)
    outcome[outcome_idx] = 1.0
    return float(np.mean((array - outcome) ** 2))


def log_loss(probas: ArrayLikeF, outcome_idx: int) -> float:
    """Negative log of the probability given to the observed outcome."""
    array = _check(probas, outcome_idx)
    return float(-np.log(max(array[outcome_idx], LOG_FLOOR)))


def rps(probas: ArrayLikeF, outcome_idx: int) -> float:
    """Compute the Ranked Probability Score.

    Args:
        probas ArrayLike: list of probabilities
        outcome_idx (int): index of the outcome. 0, 1, 2 for Home, Draw and Away
    Returns:
        float: RPS metrics

    """
    array = _check(probas, outcome_idx)
    outcome = np.zeros_like(array)
    outcome[outcome_idx] = 1.0
    cum_diff = np.cumsum(array) - np.cumsum(outcome)
    return float(np.sum(cum_diff**2) / (len(outcome) - 1))
