"""Plain value records exchanged between the Prognostix components.

Matches reference teams by identifier only; anything else (a team's history, its
aggregated statistics) is looked up through a :class:`~prognostix.data_io.history.HistorySource`.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import enum
from dataclasses import dataclass, field
from typing import Mapping

from prognostix.utils.errors import InvalidInputError

HOME, DRAW, AWAY = 0, 1, 2


@dataclass
class TeamStats:
    """Statistical profile of a team at a given point of the season.

    Every field but ``matches_played`` is optional: a missing value contributes
    nothing to the models instead of failing.

    Attributes:
        rank: League position (1 is the leader).
        points: Season points, with ``points_home``/``points_away`` per venue.
        matches_played: Matches played, with ``matches_played_home``/``matches_played_away``.
        goals_for: Goals scored, with home and away splits.
        goals_against: Goals conceded, with home and away splits.
        last5_points: Points collected over the five most recent matches.
        goals_for_last5: Goals scored over the five most recent matches.
        goals_against_last5: Goals conceded over the five most recent matches.
        xg: Expected goals per match.
        venue_points: Points collected at the venue of the upcoming match.
        venue_matches: Matches played at that venue.

    """

    rank: int | None = None
    points: int | None = None
    matches_played: int = 0
    goals_for: int | None = None
    goals_against: int | None = None
    points_home: int | None = None
    points_away: int | None = None
    matches_played_home: int | None = None
    matches_played_away: int | None = None
    goals_for_home: int | None = None
    goals_against_home: int | None = None
    goals_for_away: int | None = None
    goals_against_away: int | None = None
    last5_points: int | None = None
    goals_for_last5: int | None = None
    goals_against_last5: int | None = None
    xg: float | None = None
    venue_points: int | None = None
    venue_matches: int | None = None

    def validate(self) -> "TeamStats":
        """Check counts are non-negative and points reachable.

        Raises:
            InvalidInputError: On a negative count or ``points > 3 * matches_played``.

        """
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if value is not None and f.name != "rank" and value < 0:
                raise InvalidInputError(f"{f.name} must be non-negative, got {value}.")
        if self.rank is not None and self.rank < 1:
            raise InvalidInputError(f"rank must be at least 1, got {self.rank}.")
        if self.points is not None and self.matches_played and self.points > 3 * self.matches_played:
            raise InvalidInputError(
                f"points ({self.points}) exceed 3 x matches played ({self.matches_played})."
            )
        return self

    def with_venue(self, is_home: bool) -> "TeamStats":
        """Copy of the stats with the venue fields filled from the home/away splits."""
        if is_home:
            return dataclasses.replace(
                self, venue_points=self.points_home, venue_matches=self.matches_played_home
            )
        return dataclasses.replace(
            self, venue_points=self.points_away, venue_matches=self.matches_played_away
        )


@dataclass(frozen=True)
class MatchDetailStats:
    xg: float | None = None
    xgot: float | None = None
    shots: int | None = None
    shots_on_target: int | None = None
    big_chances: int | None = None
    possession: float | None = None
    passes_total: int | None = None
    passes_completed: int | None = None
    yellow_cards: int | None = None
    red_cards: int | None = None

    @property
    def pass_accuracy(self) -> float:
        if not self.passes_total:
            return 0.0
        return (self.passes_completed or 0) / self.passes_total

    @staticmethod
    def from_dict(row: Mapping) -> "MatchDetailStats":
        names = {f.name for f in dataclasses.fields(MatchDetailStats)}
        return MatchDetailStats(**{k: v for k, v in row.items() if k in names})


@dataclass(frozen=True)
class MatchObservation:
    """Immutable record of a match; the score stays ``None`` until it is played."""

    match_id: str
    home_team: str
    away_team: str
    date: dt.datetime
    home_goals: int | None = None
    away_goals: int | None = None
    home_detail: MatchDetailStats | None = None
    away_detail: MatchDetailStats | None = None

    def __post_init__(self) -> None:
        if self.home_team == self.away_team:
            raise InvalidInputError(f"Match {self.match_id}: a team cannot play itself.")
        if (self.home_goals is None) != (self.away_goals is None):
            raise InvalidInputError(f"Match {self.match_id}: score is half filled.")
        if self.is_played and (self.home_goals < 0 or self.away_goals < 0):  # type: ignore[operator]
            raise InvalidInputError(f"Match {self.match_id}: goals must be non-negative.")

    @property
    def is_played(self) -> bool:
        return self.home_goals is not None and self.away_goals is not None

    @property
    def outcome_index(self) -> int:
        """0 for a home win, 1 for a draw and 2 for an away win."""
        if not self.is_played:
            raise InvalidInputError(f"Match {self.match_id} has not been played yet.")
        if self.home_goals > self.away_goals:  # type: ignore[operator]
            return HOME
        if self.home_goals == self.away_goals:
            return DRAW
        return AWAY

    def involves(self, team: str) -> bool:
        return team in (self.home_team, self.away_team)

    def is_home(self, team: str) -> bool:
        if not self.involves(team):
            raise InvalidInputError(f"{team} did not play match {self.match_id}.")
        return self.home_team == team

    def goals_for(self, team: str) -> int | None:
        return self.home_goals if self.is_home(team) else self.away_goals

    def goals_against(self, team: str) -> int | None:
        return self.away_goals if self.is_home(team) else self.home_goals

    def detail_for(self, team: str) -> MatchDetailStats | None:
        return self.home_detail if self.is_home(team) else self.away_detail

    def points_for(self, team: str) -> int:
        scored, conceded = self.goals_for(team), self.goals_against(team)
        if scored is None or conceded is None:
            return 0
        if scored > conceded:
            return 3
        return 1 if scored == conceded else 0


@dataclass
class PredictionResult:
    """Outcome probabilities (percent) of a match, plus evaluation once it is played.

    The three 1X2 probabilities are non-negative and sum to 100 within rounding.
    ``brier_score`` and ``prediction_correct`` are filled exactly once by
    :func:`prognostix.metrics.evaluate_prediction`.
    """

    home_win_probability: float
    draw_probability: float
    away_win_probability: float
    home_power_score: float
    away_power_score: float
    predicted_home_goals: float | None = None
    predicted_away_goals: float | None = None
    over_2_5: float | None = None
    under_2_5: float | None = None
    btts: float | None = None
    double_chance_1x: float | None = None
    double_chance_x2: float | None = None
    double_chance_12: float | None = None
    exact_score: tuple[int, int] | None = None
    exact_score_probability: float | None = None
    brier_score: float | None = None
    prediction_correct: bool | None = None

    @property
    def probabilities(self) -> tuple[float, float, float]:
        """1X2 probabilities as fractions of one."""
        return (
            self.home_win_probability / 100.0,
            self.draw_probability / 100.0,
            self.away_win_probability / 100.0,
        )

    @property
    def is_evaluated(self) -> bool:
        return self.brier_score is not None

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)


class RankingContext(enum.Enum):
    """Which split of a :class:`TeamAggregate` a standings table is built on."""

    OVERALL = "overall"
    HOME = "home"
    AWAY = "away"


@dataclass(frozen=True)
class ContextStats:
    points: int = 0
    matches_played: int = 0
    goals_for: int = 0
    goals_against: int = 0

    @property
    def goal_difference(self) -> int:
        return self.goals_for - self.goals_against


@dataclass(frozen=True)
class TeamAggregate:
    """Aggregated standings line of a team, split by context."""

    team: str
    overall: ContextStats = field(default_factory=ContextStats)
    home: ContextStats = field(default_factory=ContextStats)
    away: ContextStats = field(default_factory=ContextStats)

    def stats(self, context: RankingContext) -> ContextStats:
        if context is RankingContext.OVERALL:
            return self.overall
        if context is RankingContext.HOME:
            return self.home
        if context is RankingContext.AWAY:
            return self.away
        raise InvalidInputError(f"Unknown ranking context {context!r}.")


@dataclass(frozen=True)
class CalibrationParameters:
    """Per-league ``(a, b)`` pair of the logistic calibration ``1 / (1 + exp(a*p + b))``."""

    a: float = -8.5
    b: float = 4.2
