"""Evaluation metrics for 1X2 forecasts.

Exported functions:
    - brier_score: Mean squared error over the three outcomes
    - log_loss: Negative log-probability of the observed outcome
    - rps: Ranked Probability Score
    - evaluate_prediction: Post-match scoring of a PredictionResult

Exported classes:
    - BrierScore, RPS: accumulating metrics with mean/std summary

"""

from .abc_metric import Metric
from .evaluation import actual_outcome, evaluate_prediction, is_prediction_correct
from .metrics_function import brier_score, log_loss, rps
from .scores import RPS, BrierScore

__all__ = [
    "BrierScore",
    "Metric",
    "RPS",
    "actual_outcome",
    "brier_score",
    "evaluate_prediction",
    "is_prediction_correct",
    "log_loss",
    "rps",
]
