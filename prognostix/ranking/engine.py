import logging
from typing import NamedTuple, Sequence

import pandas as pd

from prognostix.data_io.records import RankingContext, TeamAggregate

logger = logging.getLogger(name=__name__)


class RankedTeam(NamedTuple):
    position: int
    team: TeamAggregate


class RankingEngine:
    """Order teams by points, then goal difference, then goals scored.

    Only teams with at least one match in the requested context are ranked; the
    others get no position. Teams still tied after the three keys keep their
    input order.
    """

    @staticmethod
    def sort_key(team: TeamAggregate, context: RankingContext) -> tuple[int, int, int]:
        stats = team.stats(context)
        return (-stats.points, -stats.goal_difference, -stats.goals_for)

    def rank(
        self, teams: Sequence[TeamAggregate], context: RankingContext = RankingContext.OVERALL
    ) -> list[RankedTeam]:
        eligible = [t for t in teams if t.stats(context).matches_played > 0]
        excluded = len(teams) - len(eligible)
        if excluded:
            logger.debug("%d team(s) without %s match left unranked", excluded, context.value)
        # sorted() is stable: remaining ties keep the input order
        ordered = sorted(eligible, key=lambda t: self.sort_key(t, context))
        return [RankedTeam(position=i + 1, team=t) for i, t in enumerate(ordered)]

    def rank_all(self, teams: Sequence[TeamAggregate]) -> dict[str, dict[RankingContext, int]]:
        """Positions of every team in each of the three contexts, computed independently."""
        positions: dict[str, dict[RankingContext, int]] = {t.team: {} for t in teams}
        for context in RankingContext:
            for ranked in self.rank(teams, context):
                positions[ranked.team.team][context] = ranked.position
        logger.info("Standings computed for %d teams", len(teams))
        return positions

    @staticmethod
    def to_frame(ranked: Sequence[RankedTeam], context: RankingContext) -> pd.DataFrame:
        rows = []
        for position, team in ranked:
            stats = team.stats(context)
            rows.append(
                {
                    "position": position,
                    "team": team.team,
                    "played": stats.matches_played,
                    "points": stats.points,
                    "goals_for": stats.goals_for,
                    "goals_against": stats.goals_against,
                    "goal_difference": stats.goal_difference,
                }
            )
        return pd.DataFrame(
            rows,
            columns=[
                "position",
                "team",
                "played",
                "points",
                "goals_for",
                "goals_against",
                "goal_difference",
            ],
        )
