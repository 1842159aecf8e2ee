"""Data records and match history access.

Submodules:
    - records: Value records exchanged between components
    - history: Time-filtered match history store
    - aggregation: Team statistics rebuilt from played matches

"""

from .aggregation import aggregate_context_stats, aggregate_team_stats, league_average_goals
from .history import HistorySource, MatchHistory
from .records import (
    CalibrationParameters,
    ContextStats,
    MatchDetailStats,
    MatchObservation,
    PredictionResult,
    RankingContext,
    TeamAggregate,
    TeamStats,
)

__all__ = [
    "CalibrationParameters",
    "ContextStats",
    "HistorySource",
    "MatchDetailStats",
    "MatchHistory",
    "MatchObservation",
    "PredictionResult",
    "RankingContext",
    "TeamAggregate",
    "TeamStats",
    "aggregate_context_stats",
    "aggregate_team_stats",
    "league_average_goals",
]
