"""Immutable model configuration.

Every tunable constant lives in a frozen dataclass that is handed explicitly to
the component using it, so a league or a single backtest run can override a
weight without touching shared state::

    weights = DEFAULT_WEIGHTS.with_overrides(draw_probability=27.0)
    engine = PredictionEngine(weights=weights)

"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from prognostix.utils.errors import InvalidInputError


class _ConfigMixin:
    def with_overrides(self, **overrides: Any):
        """Return a copy of the configuration with the given fields replaced."""
        return dataclasses.replace(self, **overrides)  # type: ignore[type-var]

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]):
        """Build a configuration from a plain mapping (e.g. a parsed YAML section).

        Raises:
            InvalidInputError: If the mapping holds a key that is not a field.

        """
        known = {f.name for f in dataclasses.fields(cls)}  # type: ignore[arg-type]
        unknown = sorted(set(mapping) - known)
        if unknown:
            raise InvalidInputError(f"Unknown {cls.__name__} option(s): {', '.join(unknown)}")
        return cls(**mapping)

    def to_dict(self) -> dict[str, Any]:
        return dataclasses.asdict(self)  # type: ignore[call-overload]


@dataclass(frozen=True)
class WeightConfig(_ConfigMixin):
    """Weights of the power score and the draw reservation of the prediction engine.

    Attributes:
        base_score: Constant every team starts from.
        home_advantage: Bonus added to the home side.
        rank_weight: Weight of ``21 - rank``.
        points_weight: Weight of the season points.
        form_weight: Weight of the points collected over the last five matches.
        xg_weight: Weight of the expected goals rate.
        goal_diff_weight: Weight of the goal difference per match played.
        league_average_goals: Goals per team and per match used when no league
            average is supplied.
        draw_probability: Draw probability (percent) reserved before splitting
            the rest between the two sides.

    """

    base_score: float = 50.0
    home_advantage: float = 10.0
    rank_weight: float = 3.0
    points_weight: float = 2.0
    form_weight: float = 5.0
    xg_weight: float = 10.0
    goal_diff_weight: float = 1.5
    league_average_goals: float = 1.35
    draw_probability: float = 25.0

    def __post_init__(self) -> None:
        if not 0.0 <= self.draw_probability < 100.0:
            raise InvalidInputError("draw_probability must lie in [0, 100).")
        if self.league_average_goals <= 0:
            raise InvalidInputError("league_average_goals must be positive.")


@dataclass(frozen=True)
class ExpectedGoalsConfig(_ConfigMixin):
    """Parameters turning team statistics into Poisson goal rates."""

    season_weight: float = 0.4
    form_weight: float = 0.6
    form_matches: int = 5
    home_factor: float = 1.20
    venue_bonus: float = 0.1
    away_factor: float = 0.85
    xg_blend: float = 0.3
    elo_sensitivity: float = 0.001
    rho: float = -0.13
    max_goals: int = 7


@dataclass(frozen=True)
class EloConfig(_ConfigMixin):
    k_factor: int = 30
    initial_rating: int = 1500
    scale: float = 400.0


DEFAULT_WEIGHTS = WeightConfig()
DEFAULT_EXPECTED_GOALS = ExpectedGoalsConfig()
DEFAULT_ELO = EloConfig()
