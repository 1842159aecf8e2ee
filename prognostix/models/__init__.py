"""Predictive models for football match outcomes.

This module contains the statistical models that turn team statistics and
past results into outcome and scoreline probabilities.

Available models:
    - score_model: Power score of a team profile
    - prediction: Prediction engine (power-score split and Dixon-Coles grid)
    - expected_goals: Poisson goal rates from team statistics
    - dixon_coles: Dixon-Coles scoreline probabilities
    - score_matrix: Score prediction matrix utilities
    - estimator: Maximum likelihood fit of the Dixon-Coles parameters
    - elo: Elo rating system implementation

"""

from .dixon_coles import DixonColesModel, poisson_pmf, scoreline_probability, tau
from .elo import EloTeam, RatingSystem
from .estimator import DixonColesParameters, ParameterEstimator
from .expected_goals import ExpectedGoalsModel
from .prediction import PredictionEngine
from .score_matrix import GoalMatrix
from .score_model import power_score

__all__ = [
    "DixonColesModel",
    "DixonColesParameters",
    "EloTeam",
    "ExpectedGoalsModel",
    "GoalMatrix",
    "ParameterEstimator",
    "PredictionEngine",
    "RatingSystem",
    "poisson_pmf",
    "power_score",
    "scoreline_probability",
    "tau",
]
