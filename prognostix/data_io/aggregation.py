"""Rebuild team statistics from a list of played matches.

The functions only look at the matches they are given, so feeding them a
time-filtered history yields statistics as they stood at that time.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

import numpy as np

from prognostix.data_io.records import ContextStats, MatchObservation, TeamAggregate, TeamStats
from prognostix.utils.errors import DataUnavailableError

logger = logging.getLogger(name=__name__)

FORM_WINDOW = 5


def _played_by(team: str, matches: Iterable[MatchObservation]) -> list[MatchObservation]:
    played = [m for m in matches if m.is_played and m.involves(team)]
    return sorted(played, key=lambda m: m.date, reverse=True)


def _context(team: str, matches: Sequence[MatchObservation]) -> ContextStats:
    return ContextStats(
        points=sum(m.points_for(team) for m in matches),
        matches_played=len(matches),
        goals_for=sum(m.goals_for(team) or 0 for m in matches),
        goals_against=sum(m.goals_against(team) or 0 for m in matches),
    )


def aggregate_context_stats(team: str, matches: Iterable[MatchObservation]) -> TeamAggregate:
    """Standings line of ``team`` (overall, home and away) from ``matches``."""
    played = _played_by(team, matches)
    return TeamAggregate(
        team=team,
        overall=_context(team, played),
        home=_context(team, [m for m in played if m.home_team == team]),
        away=_context(team, [m for m in played if m.away_team == team]),
    )


def aggregate_team_stats(
    team: str, matches: Iterable[MatchObservation], *, rank: int | None = None
) -> TeamStats:
    """Compute the :class:`TeamStats` of ``team`` from its played matches.

    Form fields cover the ``FORM_WINDOW`` most recent matches. The expected
    goals rate is the mean of the per-match xG when at least one match carries it.

    Raises:
        DataUnavailableError: If ``team`` has not played any of the matches.

    """
    played = _played_by(team, matches)
    if not played:
        raise DataUnavailableError(f"No played match found for {team}.")

    aggregate = aggregate_context_stats(team, played)
    recent = played[:FORM_WINDOW]
    xgs = [d.xg for d in (m.detail_for(team) for m in played) if d is not None and d.xg is not None]

    return TeamStats(
        rank=rank,
        points=aggregate.overall.points,
        matches_played=aggregate.overall.matches_played,
        goals_for=aggregate.overall.goals_for,
        goals_against=aggregate.overall.goals_against,
        points_home=aggregate.home.points,
        points_away=aggregate.away.points,
        matches_played_home=aggregate.home.matches_played,
        matches_played_away=aggregate.away.matches_played,
        goals_for_home=aggregate.home.goals_for,
        goals_against_home=aggregate.home.goals_against,
        goals_for_away=aggregate.away.goals_for,
        goals_against_away=aggregate.away.goals_against,
        last5_points=sum(m.points_for(team) for m in recent),
        goals_for_last5=sum(m.goals_for(team) or 0 for m in recent),
        goals_against_last5=sum(m.goals_against(team) or 0 for m in recent),
        xg=float(np.mean(xgs)) if xgs else None,
    )


def league_average_goals(matches: Iterable[MatchObservation], default: float = 1.35) -> float:
    """Average goals scored by one team in one match, over the played ``matches``."""
    goals = [
        (m.home_goals or 0) + (m.away_goals or 0) for m in matches if m.is_played
    ]
    average = float(np.mean(goals)) / 2.0 if goals else 0.0
    if average <= 0:
        logger.debug("No goal history to compute a league average, using %.2f", default)
        return default
    return average
