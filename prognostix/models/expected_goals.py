import logging
from typing import Mapping, Sequence

from prognostix.config import DEFAULT_EXPECTED_GOALS, ExpectedGoalsConfig
from prognostix.data_io.records import MatchObservation, TeamStats
from prognostix.utils.typing import GoalExpectation

logger = logging.getLogger(name=__name__)

__all__ = ["ExpectedGoalsModel"]

H2H_WINDOW = 5
MIN_EFFICIENCY_MATCHES = 3
MIN_TACTICAL_MATCHES = 3
DEFAULT_POSSESSION = 50.0
DEFAULT_SHOT_ACCURACY = 0.33


class ExpectedGoalsModel:
    """Turn two statistical profiles into the Poisson rates of a match.

    ``lambda = attack strength x defensive weakness x league average``, where both
    strengths blend the season average with the recent form and are expressed
    relative to the league average. The rate is then adjusted for the venue, the
    Elo gap when ratings are known, the team's xG and the head-to-head record.
    """

    def __init__(self, config: ExpectedGoalsConfig = DEFAULT_EXPECTED_GOALS) -> None:
        self.config = config

    def weighted_strength(
        self,
        season_goals: int | None,
        season_matches: int | None,
        form_goals: int | None,
        league_average: float,
    ) -> float:
        if not season_matches:
            return 1.0
        avg_season = (season_goals or 0) / season_matches
        form_matches = min(self.config.form_matches, season_matches)
        avg_form = avg_season if form_goals is None else form_goals / form_matches
        weighted = avg_season * self.config.season_weight + avg_form * self.config.form_weight
        return weighted / league_average

    def team_rate(
        self,
        attacker: TeamStats,
        defender: TeamStats,
        is_home: bool,
        league_average: float,
        attacker_rating: int | None = None,
        defender_rating: int | None = None,
    ) -> float:
        cfg = self.config
        attack = self.weighted_strength(
            attacker.goals_for, attacker.matches_played, attacker.goals_for_last5, league_average
        )
        weakness = self.weighted_strength(
            defender.goals_against,
            defender.matches_played,
            defender.goals_against_last5,
            league_average,
        )
        expected = attack * weakness * league_average

        if attacker_rating is not None and defender_rating is not None:
            expected *= 1.0 + (attacker_rating - defender_rating) * cfg.elo_sensitivity

        if is_home:
            factor = cfg.home_factor
            if attacker.venue_matches and attacker.points is not None:
                ppg_venue = (attacker.venue_points or 0) / attacker.venue_matches
                ppg_overall = attacker.points / max(1, attacker.matches_played)
                if ppg_venue > ppg_overall:
                    factor += cfg.venue_bonus
            expected *= factor
        else:
            expected *= cfg.away_factor

        if attacker.xg is not None and attacker.xg > 0:
            expected = expected * (1.0 - cfg.xg_blend) + attacker.xg * cfg.xg_blend
        return expected

    @staticmethod
    def head_to_head_factor(team: str, head_to_head: Sequence[MatchObservation]) -> float:
        """+0.05 per win of ``team`` and -0.02 otherwise, over the last five meetings."""
        factor = 0.0
        played = [m for m in head_to_head if m.is_played and m.involves(team)]
        for match in played[:H2H_WINDOW]:
            scored, conceded = match.goals_for(team), match.goals_against(team)
            factor += 0.05 if scored > conceded else -0.02  # type: ignore[operator]
        return factor

    @staticmethod
    def finishing_efficiency(team: str, history: Sequence[MatchObservation]) -> float:
        """Goals over xG in ``history``, clamped to [0.9, 1.1]; 1.0 below three xG samples."""
        total_xg = 0.0
        total_goals = 0
        count = 0
        for match in history:
            if not (match.is_played and match.involves(team)):
                continue
            detail = match.detail_for(team)
            if detail is None or detail.xg is None:
                continue
            total_xg += detail.xg
            total_goals += match.goals_for(team)  # type: ignore[operator]
            count += 1
        if count < MIN_EFFICIENCY_MATCHES or total_xg == 0:
            return 1.0
        return max(0.9, min(1.1, total_goals / total_xg))

    @staticmethod
    def tactical_bonus(team: str, recent: Sequence[MatchObservation]) -> float:
        """Multiplier on the goal rate of ``team`` read from the detail stats of its recent matches.

        Starting from 1.0:

        - +0.05 when the average xGOT (xG when xGOT is missing) exceeds 1.5, +0.05 more above 2.0
        - +0.05 when the team averages at least three big chances
        - +0.03 when the average of possession x pass accuracy exceeds 45
        - +0.04 when more than 40% of the shots are on target

        Matches without detail stats are ignored; below three usable matches the
        multiplier stays at 1.0.
        """
        details = [
            m.detail_for(team) for m in recent if m.is_played and m.involves(team)
        ]
        details = [d for d in details if d is not None]
        if len(details) < MIN_TACTICAL_MATCHES:
            return 1.0

        count = len(details)
        avg_xgot = sum(d.xgot if d.xgot is not None else (d.xg or 0.0) for d in details) / count
        avg_big_chances = sum(d.big_chances or 0 for d in details) / count
        avg_dominance = (
            sum(
                (d.possession if d.possession is not None else DEFAULT_POSSESSION) * d.pass_accuracy
                for d in details
            )
            / count
        )
        shots = sum(d.shots or 0 for d in details)
        on_target = sum(d.shots_on_target or 0 for d in details)
        shot_accuracy = on_target / shots if shots > 0 else DEFAULT_SHOT_ACCURACY

        bonus = 1.0
        if avg_xgot > 1.5:
            bonus += 0.05
        if avg_xgot > 2.0:
            bonus += 0.05
        if avg_big_chances >= 3.0:
            bonus += 0.05
        if avg_dominance > 45.0:
            bonus += 0.03
        if shot_accuracy > 0.40:
            bonus += 0.04
        return bonus

    def expected_goals(
        self,
        home_stats: TeamStats,
        away_stats: TeamStats,
        league_average: float,
        *,
        home_team: str | None = None,
        away_team: str | None = None,
        head_to_head: Sequence[MatchObservation] = (),
        home_recent: Sequence[MatchObservation] = (),
        away_recent: Sequence[MatchObservation] = (),
        ratings: Mapping[str, int] | None = None,
    ) -> GoalExpectation:
        home_rating = away_rating = None
        if ratings is not None and home_team in ratings and away_team in ratings:
            home_rating, away_rating = ratings[home_team], ratings[away_team]  # type: ignore[index]

        home_rate = self.team_rate(
            home_stats, away_stats, True, league_average, home_rating, away_rating
        )
        away_rate = self.team_rate(
            away_stats, home_stats, False, league_average, away_rating, home_rating
        )

        if head_to_head and home_team is not None and away_team is not None:
            home_rate *= self.finishing_efficiency(home_team, head_to_head)
            away_rate *= self.finishing_efficiency(away_team, head_to_head)
            h2h = self.head_to_head_factor(home_team, head_to_head)
            if h2h > 0:
                home_rate *= 1.0 + h2h
            else:
                away_rate *= 1.0 + abs(h2h)

        if home_team is not None:
            home_rate *= self.tactical_bonus(home_team, home_recent)
        if away_team is not None:
            away_rate *= self.tactical_bonus(away_team, away_recent)

        logger.debug("Expected goals %s vs %s: %.3f - %.3f", home_team, away_team, home_rate, away_rate)
        return GoalExpectation(home=home_rate, away=away_rate)
