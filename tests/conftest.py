import datetime as dt

import pytest

from prognostix.data_io.history import MatchHistory
from prognostix.data_io.records import MatchObservation


@pytest.fixture
def make_match():
    counter = iter(range(10_000))

    def _make(home, away, day, home_goals=None, away_goals=None, match_id=None, **kwargs):
        if match_id is None:
            match_id = f"m{next(counter)}"
        return MatchObservation(
            match_id=match_id,
            home_team=home,
            away_team=away,
            date=dt.datetime(2024, 1, 1) + dt.timedelta(days=day),
            home_goals=home_goals,
            away_goals=away_goals,
            **kwargs,
        )

    return _make


@pytest.fixture
def small_history(make_match):
    """Four teams, two opening rounds, then a round with a target fixture on day 19."""
    matches = [
        make_match("A", "B", 5, 2, 0, match_id="m1"),
        make_match("C", "D", 5, 1, 1, match_id="m2"),
        make_match("A", "C", 12, 1, 0, match_id="m3"),
        make_match("B", "D", 12, 0, 2, match_id="m4"),
        make_match("A", "D", 19, 3, 1, match_id="m5"),
        make_match("B", "C", 26, match_id="m6"),
    ]
    return MatchHistory(matches)
