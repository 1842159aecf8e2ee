from .backtest import BacktestReport, Backtester
from .calibration import CalibrationEngine, CalibrationSample
from .config import EloConfig, ExpectedGoalsConfig, WeightConfig
from .data_io import MatchHistory, MatchObservation, PredictionResult, TeamStats
from .data_io.records import CalibrationParameters, RankingContext, TeamAggregate
from .metrics import evaluate_prediction
from .models import (
    DixonColesModel,
    DixonColesParameters,
    ParameterEstimator,
    PredictionEngine,
    RatingSystem,
    power_score,
)
from .ranking import RankingEngine
from .utils.errors import (
    DataUnavailableError,
    InvalidInputError,
    NotConvergedWarning,
    PrognostixError,
)
from .utils.typing import GoalExpectation, ProbaResult

__version__ = "0.1.0"

__all__ = [
    "BacktestReport",
    "Backtester",
    "CalibrationEngine",
    "CalibrationParameters",
    "CalibrationSample",
    "DataUnavailableError",
    "DixonColesModel",
    "DixonColesParameters",
    "EloConfig",
    "ExpectedGoalsConfig",
    "GoalExpectation",
    "InvalidInputError",
    "MatchHistory",
    "MatchObservation",
    "NotConvergedWarning",
    "ParameterEstimator",
    "PredictionEngine",
    "PredictionResult",
    "ProbaResult",
    "PrognostixError",
    "RankingContext",
    "RankingEngine",
    "RatingSystem",
    "TeamAggregate",
    "TeamStats",
    "WeightConfig",
    "evaluate_prediction",
    "power_score",
]
