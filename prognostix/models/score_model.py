from prognostix.config import DEFAULT_WEIGHTS, WeightConfig
from prognostix.data_io.records import TeamStats

__all__ = ["power_score"]

RANK_CEILING = 21


def power_score(stats: TeamStats, is_home: bool, weights: WeightConfig = DEFAULT_WEIGHTS) -> float:
    """Scalar strength of a team from its statistical profile.

    ``base + home bonus + points*w + last5*w + xG*w + (21 - rank)*w + goal difference per match*w``.
    Missing fields contribute nothing.

    Args:
        stats: Team profile.
        is_home: Whether the team plays at home.
        weights: Weight configuration.

    Returns:
        float: The power score.

    """
    score = weights.base_score
    if is_home:
        score += weights.home_advantage
    if stats.points is not None:
        score += stats.points * weights.points_weight
    if stats.last5_points is not None:
        score += stats.last5_points * weights.form_weight
    if stats.xg is not None:
        score += stats.xg * weights.xg_weight
    if stats.rank is not None:
        score += (RANK_CEILING - stats.rank) * weights.rank_weight
    if stats.matches_played and stats.goals_for is not None and stats.goals_against is not None:
        goal_diff = (stats.goals_for - stats.goals_against) / stats.matches_played
        score += goal_diff * weights.goal_diff_weight
    return score
