"""Replay past matches and score the forecasts that would have been issued.

Every match is predicted from the history available strictly before its kick-off,
so a backtest measures the forecasting error the engine would really have made.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from tqdm.auto import tqdm

from prognostix.calibration import CalibrationSample
from prognostix.data_io.aggregation import aggregate_team_stats, league_average_goals
from prognostix.data_io.history import DateLike, HistorySource
from prognostix.data_io.records import MatchObservation, PredictionResult
from prognostix.metrics import brier_score, evaluate_prediction, log_loss
from prognostix.models.prediction import PredictionEngine

logger = logging.getLogger(name=__name__)

__all__ = ["BacktestRecord", "BacktestReport", "Backtester"]


@dataclass(frozen=True)
class BacktestRecord:
    match_id: str
    date: dt.date | dt.datetime
    home_team: str
    away_team: str
    probabilities: tuple[float, float, float]
    outcome: int
    brier_score: float
    log_loss: float
    correct: bool


@dataclass
class BacktestReport:
    """Per-match scores of a backtest and their averages.

    Attributes:
        records: One entry per evaluated match, in chronological order.
        n_skipped: Matches left out because a team had no prior history.
        calibration_samples: Three ``(predicted, actual)`` pairs per evaluated match.

    """

    records: list[BacktestRecord] = field(default_factory=list)
    n_skipped: int = 0
    calibration_samples: list[CalibrationSample] = field(default_factory=list)

    @property
    def n_matches(self) -> int:
        return len(self.records)

    @property
    def mean_brier_score(self) -> float:
        if not self.records:
            return float("nan")
        return float(np.mean([r.brier_score for r in self.records]))

    @property
    def mean_log_loss(self) -> float:
        if not self.records:
            return float("nan")
        return float(np.mean([r.log_loss for r in self.records]))

    @property
    def accuracy(self) -> float:
        if not self.records:
            return float("nan")
        return float(np.mean([r.correct for r in self.records]))

    def add(self, record: BacktestRecord) -> None:
        self.records.append(record)
        for idx, predicted in enumerate(record.probabilities):
            self.calibration_samples.append(
                CalibrationSample(predicted=predicted, actual=float(idx == record.outcome))
            )

    def to_frame(self) -> pd.DataFrame:
        rows = [
            {
                "match_id": r.match_id,
                "date": r.date,
                "home_team": r.home_team,
                "away_team": r.away_team,
                "proba_home": r.probabilities[0],
                "proba_draw": r.probabilities[1],
                "proba_away": r.probabilities[2],
                "outcome": r.outcome,
                "brier_score": r.brier_score,
                "log_loss": r.log_loss,
                "correct": r.correct,
            }
            for r in self.records
        ]
        return pd.DataFrame(
            rows,
            columns=[
                "match_id",
                "date",
                "home_team",
                "away_team",
                "proba_home",
                "proba_draw",
                "proba_away",
                "outcome",
                "brier_score",
                "log_loss",
                "correct",
            ],
        )


def _strictly_before(matches: list[MatchObservation], kick_off: pd.Timestamp) -> list[MatchObservation]:
    return [m for m in matches if m.is_played and pd.Timestamp(m.date) < kick_off]


class Backtester:
    """Walk-forward evaluation of a :class:`PredictionEngine` on a match history.

    Args:
        history: Source of past matches.
        engine: Engine issuing the forecasts, ``predict_scoreline`` is used.
        recent_limit: How many previous matches of each team feed its statistics,
            all of them when None.
        show_progress: Display a progress bar over the evaluated matches.

    """

    def __init__(
        self,
        history: HistorySource,
        engine: PredictionEngine | None = None,
        recent_limit: int | None = 10,
        show_progress: bool = False,
    ) -> None:
        self.history = history
        self.engine = engine if engine is not None else PredictionEngine()
        self.recent_limit = recent_limit
        self.show_progress = show_progress

    def predict_before(self, match: MatchObservation) -> PredictionResult | None:
        """Forecast ``match`` from the history strictly before its date.

        Returns None when one of the teams has no prior played match.
        """
        kick_off = pd.Timestamp(match.date)
        home_recent = _strictly_before(
            self.history.find_recent_matches(
                match.home_team, before=kick_off, limit=self.recent_limit
            ),
            kick_off,
        )
        away_recent = _strictly_before(
            self.history.find_recent_matches(
                match.away_team, before=kick_off, limit=self.recent_limit
            ),
            kick_off,
        )
        if not home_recent or not away_recent:
            return None
        head_to_head = _strictly_before(
            self.history.find_matches_between(match.home_team, match.away_team, before=kick_off),
            kick_off,
        )

        seen = {m.match_id: m for m in home_recent + away_recent}
        league_average = league_average_goals(
            seen.values(), default=self.engine.weights.league_average_goals
        )
        home_stats = aggregate_team_stats(match.home_team, home_recent).with_venue(True)
        away_stats = aggregate_team_stats(match.away_team, away_recent).with_venue(False)
        return self.engine.predict_scoreline(
            home_stats,
            away_stats,
            league_average,
            home_team=match.home_team,
            away_team=match.away_team,
            head_to_head=head_to_head,
            home_recent=home_recent,
            away_recent=away_recent,
        )

    def evaluate_match(self, match: MatchObservation) -> BacktestRecord | None:
        """Predict and score one played match, None if it cannot be predicted.

        Only reads the history, so matches can be evaluated concurrently.
        """
        prediction = self.predict_before(match)
        if prediction is None:
            logger.debug("Skipping %s: no prior history for one of the teams", match.match_id)
            return None
        outcome = match.outcome_index
        probas = prediction.probabilities
        evaluate_prediction(prediction, match.home_goals, match.away_goals)  # type: ignore[arg-type]
        return BacktestRecord(
            match_id=match.match_id,
            date=match.date,
            home_team=match.home_team,
            away_team=match.away_team,
            probabilities=probas,
            outcome=outcome,
            brier_score=brier_score(probas, outcome),
            log_loss=log_loss(probas, outcome),
            correct=bool(prediction.prediction_correct),
        )

    def run_backtest(self, start: DateLike, end: DateLike) -> BacktestReport:
        """Evaluate every played match with ``start <= date <= end``, oldest first.

        Returns:
            BacktestReport: ``mean_brier_score`` is ``nan`` when no match could be evaluated.

        """
        matches = self.history.played_matches(start, end)
        report = BacktestReport()
        for match in tqdm(matches, disable=not self.show_progress, desc="Backtest"):
            record = self.evaluate_match(match)
            if record is None:
                report.n_skipped += 1
            else:
                report.add(record)

        if report.n_matches == 0:
            logger.warning("No match could be evaluated between %s and %s", start, end)
        else:
            logger.info(
                "Backtest over %d matches (%d skipped): Brier %.4f, log loss %.4f",
                report.n_matches,
                report.n_skipped,
                report.mean_brier_score,
                report.mean_log_loss,
            )
        return report
