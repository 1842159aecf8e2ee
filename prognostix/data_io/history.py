from __future__ import annotations

import datetime as dt
import logging
from typing import Iterable, Iterator, Protocol

import numpy as np
import pandas as pd

from prognostix.data_io.aggregation import aggregate_context_stats
from prognostix.data_io.records import (
    MatchDetailStats,
    MatchObservation,
    RankingContext,
    TeamAggregate,
)
from prognostix.utils.decorators import verify_required_column
from prognostix.utils.errors import DataUnavailableError, InvalidInputError

logger = logging.getLogger(name=__name__)

__all__ = ["HistorySource", "MatchHistory"]

DateLike = dt.date | dt.datetime | pd.Timestamp | str


class HistorySource(Protocol):
    """Read-only access to past matches, as needed by the backtester and the ranking."""

    def find_matches_between(
        self, team_a: str, team_b: str, before: DateLike | None = None
    ) -> list[MatchObservation]:
        ...

    def find_recent_matches(
        self, team: str, before: DateLike | None = None, limit: int | None = None
    ) -> list[MatchObservation]:
        ...

    def find_aggregated_stats(
        self,
        team: str,
        context: RankingContext | None = None,
        before: DateLike | None = None,
    ) -> TeamAggregate:
        ...

    def played_matches(self, start: DateLike, end: DateLike) -> list[MatchObservation]:
        ...


def _optional_int(value) -> int | None:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _optional_float(value) -> float | None:
    if value is None or pd.isna(value):
        return None
    return float(value)


# detail field -> (home column, away column, converter)
_DETAIL_COLUMNS = {
    "xg": ("hxg", "axg", _optional_float),
    "xgot": ("hxgot", "axgot", _optional_float),
    "shots": ("hs", "as", _optional_int),
    "shots_on_target": ("hst", "ast", _optional_int),
    "big_chances": ("hbc", "abc", _optional_int),
    "possession": ("hposs", "aposs", _optional_float),
    "passes_total": ("hpass", "apass", _optional_int),
    "passes_completed": ("hpassc", "apassc", _optional_int),
    "yellow_cards": ("hy", "ay", _optional_int),
    "red_cards": ("hr", "ar", _optional_int),
}


def _detail_from_row(row: dict, home: bool) -> MatchDetailStats:
    values = {}
    for field, (home_col, away_col, convert) in _DETAIL_COLUMNS.items():
        column = home_col if home else away_col
        if column in row:
            values[field] = convert(row[column])
    return MatchDetailStats.from_dict(values)


class MatchHistory:
    """In-memory match store keyed by match identifier.

    Observations are kept in a dictionary and a small pandas index (date, teams,
    played flag) is used to answer the time-filtered queries. Every query that
    takes ``before`` only returns matches played strictly before that instant.
    """

    def __init__(self, matches: Iterable[MatchObservation] = ()) -> None:
        self._matches: dict[str, MatchObservation] = {}
        self._index: pd.DataFrame | None = None
        for match in matches:
            self.add(match)

    def add(self, match: MatchObservation) -> None:
        if match.match_id in self._matches:
            raise InvalidInputError(f"Match {match.match_id} is already stored.")
        self._matches[match.match_id] = match
        self._index = None

    def __len__(self) -> int:
        return len(self._matches)

    def __iter__(self) -> Iterator[MatchObservation]:
        return iter(self._lookup(self.index["match_id"]))

    def __getitem__(self, match_id: str) -> MatchObservation:
        try:
            return self._matches[match_id]
        except KeyError:
            raise DataUnavailableError(f"Unknown match {match_id}.") from None

    @property
    def index(self) -> pd.DataFrame:
        if self._index is None:
            rows = [
                {
                    "match_id": m.match_id,
                    "date": pd.Timestamp(m.date),
                    "home_team": m.home_team,
                    "away_team": m.away_team,
                    "played": m.is_played,
                }
                for m in self._matches.values()
            ]
            index = pd.DataFrame(
                rows, columns=["match_id", "date", "home_team", "away_team", "played"]
            )
            self._index = index.sort_values("date", kind="mergesort").reset_index(drop=True)
        return self._index

    def teams(self) -> list[str]:
        index = self.index
        return sorted(set(index["home_team"]) | set(index["away_team"]))

    def _lookup(self, match_ids: Iterable[str]) -> list[MatchObservation]:
        return [self._matches[match_id] for match_id in match_ids]

    def _played_before(self, before: DateLike | None) -> pd.Series:
        index = self.index
        mask = index["played"].astype(bool)
        if before is not None:
            mask &= index["date"] < pd.Timestamp(before)
        return mask

    def find_matches_between(
        self, team_a: str, team_b: str, before: DateLike | None = None
    ) -> list[MatchObservation]:
        """Head-to-head matches of the two teams (either venue), most recent first."""
        index = self.index
        pair = ((index["home_team"] == team_a) & (index["away_team"] == team_b)) | (
            (index["home_team"] == team_b) & (index["away_team"] == team_a)
        )
        selected = index.loc[self._played_before(before) & pair, "match_id"]
        return self._lookup(selected.iloc[::-1])

    def find_recent_matches(
        self, team: str, before: DateLike | None = None, limit: int | None = None
    ) -> list[MatchObservation]:
        """Played matches of ``team``, most recent first, at most ``limit`` of them."""
        if limit is not None and limit < 0:
            raise InvalidInputError("limit must be non-negative.")
        index = self.index
        involved = (index["home_team"] == team) | (index["away_team"] == team)
        selected = index.loc[self._played_before(before) & involved, "match_id"].iloc[::-1]
        if limit is not None:
            selected = selected.iloc[:limit]
        return self._lookup(selected)

    def find_aggregated_stats(
        self,
        team: str,
        context: RankingContext | None = None,
        before: DateLike | None = None,
    ) -> TeamAggregate:
        """Standings line of ``team`` built from its played matches.

        Raises:
            DataUnavailableError: If the team has no played match, or none in ``context``.

        """
        aggregate = aggregate_context_stats(team, self.find_recent_matches(team, before=before))
        if aggregate.overall.matches_played == 0:
            raise DataUnavailableError(f"No played match found for {team}.")
        if context is not None and aggregate.stats(context).matches_played == 0:
            raise DataUnavailableError(f"No {context.value} match found for {team}.")
        return aggregate

    def played_matches(self, start: DateLike, end: DateLike) -> list[MatchObservation]:
        """Played matches with ``start <= date <= end``, in chronological order.

        A bare date as ``end`` covers the whole day.
        """
        start_ts = pd.Timestamp(start)
        end_ts = pd.Timestamp(end)
        if end_ts == end_ts.normalize():
            end_ts = end_ts + pd.Timedelta(days=1) - pd.Timedelta(microseconds=1)
        if end_ts < start_ts:
            raise InvalidInputError("end must not precede start.")
        index = self.index
        mask = index["played"].astype(bool) & (index["date"] >= start_ts) & (index["date"] <= end_ts)
        return self._lookup(index.loc[mask, "match_id"])

    @classmethod
    @verify_required_column(column_names={"home_team", "away_team", "date", "fthg", "ftag"})
    def from_frame(cls, df: pd.DataFrame) -> "MatchHistory":
        """Build a history from a results table.

        Expected columns are ``home_team``, ``away_team``, ``date``, ``fthg`` and
        ``ftag`` (missing goals mean the match is not played yet). Optional
        columns: ``match_id`` and the per-side detail statistics ``hxg``/``axg``,
        ``hxgot``/``axgot``, ``hs``/``as``, ``hst``/``ast``, ``hbc``/``abc`` (big
        chances), ``hposs``/``aposs``, ``hpass``/``apass`` (passes attempted),
        ``hpassc``/``apassc`` (passes completed), ``hy``/``ay`` and ``hr``/``ar``.
        """
        frame = df.copy().reset_index(drop=True)
        frame["date"] = pd.to_datetime(frame["date"])
        if "match_id" not in frame.columns:
            frame["match_id"] = [str(i) for i in range(len(frame))]

        matches = []
        for row in frame.to_dict(orient="records"):
            home_detail = _detail_from_row(row, home=True)
            away_detail = _detail_from_row(row, home=False)
            matches.append(
                MatchObservation(
                    match_id=str(row["match_id"]),
                    home_team=row["home_team"],
                    away_team=row["away_team"],
                    date=row["date"].to_pydatetime(),
                    home_goals=_optional_int(row["fthg"]),
                    away_goals=_optional_int(row["ftag"]),
                    home_detail=home_detail,
                    away_detail=away_detail,
                )
            )
        logger.debug("Loaded %d matches into the history", len(matches))
        return cls(matches)

    def to_frame(self, played_only: bool = True) -> pd.DataFrame:
        """Results table with the columns used by the estimators."""
        rows = [
            {
                "match_id": m.match_id,
                "date": pd.Timestamp(m.date),
                "home_team": m.home_team,
                "away_team": m.away_team,
                "fthg": m.home_goals if m.is_played else np.nan,
                "ftag": m.away_goals if m.is_played else np.nan,
            }
            for m in self
            if m.is_played or not played_only
        ]
        return pd.DataFrame(
            rows, columns=["match_id", "date", "home_team", "away_team", "fthg", "ftag"]
        )
