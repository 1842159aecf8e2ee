"""League standings.

Exported names:
    - RankingEngine: ordering of aggregated team stats under a context
    - RankedTeam: a team and its position
    - RankingContext: overall / home / away split

"""

from prognostix.data_io.records import RankingContext

from .engine import RankedTeam, RankingEngine

__all__ = ["RankedTeam", "RankingContext", "RankingEngine"]
