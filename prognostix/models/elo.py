import logging
import math

import pandas as pd

from prognostix.config import DEFAULT_ELO, EloConfig
from prognostix.utils.decorators import verify_required_column
from prognostix.utils.errors import InvalidInputError

logger = logging.getLogger(name=__name__)

__all__ = ["EloTeam", "RatingSystem"]


class EloTeam:
    """A team and its integer Elo rating."""

    def __init__(self, name: str, rating: int = DEFAULT_ELO.initial_rating) -> None:
        self.name_ = name
        self.rating = rating

    @property
    def name(self) -> str:
        return self.name_

    @property
    def rating(self) -> int:
        return self.rating_

    @rating.setter
    def rating(self, new_rating: int) -> None:
        if isinstance(new_rating, bool) or not isinstance(new_rating, int):
            raise TypeError(f"Rating must be an int, got {type(new_rating)} instead.")
        self.rating_ = new_rating

    def __str__(self) -> str:
        return f"team {self.name}-rating {self.rating}"

    def __repr__(self) -> str:
        return str(self)


class RatingSystem:
    """Elo ratings updated once per played match.

    The update is carried out on integers: the delta ``K * (actual - expected)``
    is truncated toward zero, then multiplied by ``ln(goal_diff + 1)`` for wins
    by two goals or more and truncated again. Both teams move by the same amount
    in opposite directions.
    """

    def __init__(self, config: EloConfig = DEFAULT_ELO) -> None:
        self.config = config
        self.championnat: dict[str, EloTeam] = {}

    def expected_score(self, home_rating: int, away_rating: int) -> float:
        return 1.0 / (1.0 + 10 ** ((away_rating - home_rating) / self.config.scale))

    @staticmethod
    def actual_score(home_goals: int, away_goals: int) -> float:
        if home_goals > away_goals:
            return 1.0
        if home_goals < away_goals:
            return 0.0
        return 0.5

    def update_ratings(
        self, home_rating: int, away_rating: int, home_goals: int, away_goals: int
    ) -> tuple[int, int]:
        """New ``(home, away)`` ratings after a match.

        Raises:
            InvalidInputError: On a negative goal count.

        """
        if home_goals < 0 or away_goals < 0:
            raise InvalidInputError("Goal counts must be non-negative.")
        actual = self.actual_score(home_goals, away_goals)
        expected = self.expected_score(home_rating, away_rating)
        delta = int(self.config.k_factor * (actual - expected))

        goal_diff = abs(home_goals - away_goals)
        if goal_diff > 1:
            delta = int(delta * math.log(goal_diff + 1))

        return home_rating + delta, away_rating - delta

    def team(self, name: str) -> EloTeam:
        if name not in self.championnat:
            self.championnat[name] = EloTeam(name, self.config.initial_rating)
        return self.championnat[name]

    def record_match(self, home_team: str, away_team: str, home_goals: int, away_goals: int) -> None:
        home, away = self.team(home_team), self.team(away_team)
        home.rating, away.rating = self.update_ratings(
            home.rating, away.rating, home_goals, away_goals
        )

    @verify_required_column(column_names={"home_team", "away_team", "fthg", "ftag", "date"})
    def fit(self, X_train: pd.DataFrame) -> "RatingSystem":
        """Replay every played match of ``X_train`` in chronological order."""
        data = X_train.dropna(subset=["fthg", "ftag"]).copy()
        data["date"] = pd.to_datetime(data["date"])
        data = data.sort_values("date", kind="mergesort")
        for row in data.itertuples(index=False):
            self.record_match(row.home_team, row.away_team, int(row.fthg), int(row.ftag))
        logger.info("Elo ratings replayed over %d matches", len(data))
        return self

    def reset(self) -> None:
        self.championnat = {}

    def ratings(self) -> dict[str, int]:
        return {name: team.rating for name, team in self.championnat.items()}

    def __str__(self) -> str:
        classement = ""
        ordered = sorted(self.championnat.values(), key=lambda t: -t.rating)
        for i, team in enumerate(ordered):
            classement += f"{i + 1}. {team.name} : {team.rating} \n"
        return classement or "{}"
