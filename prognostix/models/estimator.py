"""Maximum likelihood estimation of the Dixon-Coles team parameters.

Goal rates follow an exponential link::

    lambda = exp(home + attack[home_team] - defence[away_team])
    mu     = exp(attack[away_team] - defence[home_team])

and each match's log-likelihood is weighted by ``exp(-xi * days_ago)`` so recent
results dominate. The objective is not smooth where the ``tau`` correction is
clamped, hence the derivative-free Nelder-Mead simplex.
"""

from __future__ import annotations

import datetime as dt
import logging
import warnings
from dataclasses import dataclass, field
from typing import Mapping

import numpy as np
import pandas as pd
import scipy.optimize as optimize
import scipy.stats as stats

from prognostix.models.dixon_coles import DixonColesModel
from prognostix.models.score_matrix import GoalMatrix
from prognostix.utils.decorators import verify_required_column
from prognostix.utils.errors import DataUnavailableError, InvalidInputError, NotConvergedWarning
from prognostix.utils.typing import GoalExpectation

logger = logging.getLogger(name=__name__)

__all__ = ["DixonColesParameters", "ParameterEstimator"]

PROBA_FLOOR = 1e-10
EXPONENT_BOUND = 20.0


@dataclass(frozen=True)
class DixonColesParameters:
    """Fitted league parameters.

    Attributes:
        attack: Attack coefficient per team (sums to zero).
        defence: Defence coefficient per team, higher is tighter.
        home_advantage: Home constant added to the home log-rate.
        rho: Low-score dependence.
        converged: False when the optimizer ran out of iterations.
        log_likelihood: Weighted log-likelihood at the returned point, penalty included.
        n_iter: Simplex iterations performed.

    """

    attack: Mapping[str, float]
    defence: Mapping[str, float]
    home_advantage: float
    rho: float
    converged: bool = True
    log_likelihood: float = float("nan")
    n_iter: int = 0
    teams: tuple[str, ...] = field(default=())

    def _check(self, team: str) -> None:
        if team not in self.attack:
            raise DataUnavailableError(f"No fitted parameters for {team}.")

    def expected_goals(self, home_team: str, away_team: str) -> GoalExpectation:
        self._check(home_team)
        self._check(away_team)
        lamb = np.exp(self.home_advantage + self.attack[home_team] - self.defence[away_team])
        mu = np.exp(self.attack[away_team] - self.defence[home_team])
        return GoalExpectation(home=float(lamb), away=float(mu))

    def predict(self, home_team: str, away_team: str, max_goals: int = 7) -> GoalMatrix:
        """Score grid of a match between two fitted teams."""
        rates = self.expected_goals(home_team, away_team)
        return DixonColesModel(rho=self.rho, max_goals=max_goals).score_matrix(
            rates.home, rates.away
        )

    def to_frame(self) -> pd.DataFrame:
        """Team ratings sorted by overall strength (attack + defence)."""
        data = [
            {
                "team": team,
                "attack": self.attack[team],
                "defence": self.defence[team],
                "overall": self.attack[team] + self.defence[team],
            }
            for team in self.teams
        ]
        return pd.DataFrame(data, columns=["team", "attack", "defence", "overall"]).sort_values(
            "overall", ascending=False, kind="mergesort"
        )


def _tau_vectorized(
    home_goals: np.ndarray,
    away_goals: np.ndarray,
    lambda_home: np.ndarray,
    lambda_away: np.ndarray,
    rho: float,
) -> np.ndarray:
    tau = np.ones(len(home_goals))

    mask_00 = (home_goals == 0) & (away_goals == 0)
    tau[mask_00] = 1 - lambda_home[mask_00] * lambda_away[mask_00] * rho

    mask_01 = (home_goals == 0) & (away_goals == 1)
    tau[mask_01] = 1 + lambda_home[mask_01] * rho

    mask_10 = (home_goals == 1) & (away_goals == 0)
    tau[mask_10] = 1 + lambda_away[mask_10] * rho

    mask_11 = (home_goals == 1) & (away_goals == 1)
    tau[mask_11] = 1 - rho

    return tau


class ParameterEstimator:
    """Fit attack/defence per team, the home constant and rho on past results.

    The sum-to-zero constraint on the attack coefficients is enforced as a
    quadratic penalty so the unconstrained simplex can be used.

    Args:
        xi: Time-decay rate per day.
        max_iter: Simplex iteration budget.
        xatol: Absolute tolerance on the simplex vertices.
        fatol: Absolute tolerance on the objective.
        penalty: Weight of the sum-to-zero penalty.
        rtol: Relative tolerance. scipy's Nelder-Mead only accepts absolute
            tolerances, so it is folded into them at the start of the fit:
            ``xatol`` becomes ``max(xatol, rtol * max(1, |x0|))`` and ``fatol``
            ``max(fatol, rtol * |f(x0)|)``.

    """

    def __init__(
        self,
        xi: float = 0.0019,
        max_iter: int = 20_000,
        xatol: float = 1e-6,
        fatol: float = 1e-8,
        penalty: float = 1000.0,
        rtol: float = 1e-10,
    ) -> None:
        if xi < 0:
            raise InvalidInputError("xi must be non-negative.")
        if max_iter < 1:
            raise InvalidInputError("max_iter must be positive.")
        if rtol < 0:
            raise InvalidInputError("rtol must be non-negative.")
        self.xi = xi
        self.max_iter = max_iter
        self.xatol = xatol
        self.fatol = fatol
        self.penalty = penalty
        self.rtol = rtol

    def time_weights(self, dates: pd.Series, reference_date: pd.Timestamp) -> np.ndarray:
        """``exp(-xi * days)`` where ``days`` counts back from the reference date."""
        days_ago = (reference_date - pd.to_datetime(dates)).dt.days.clip(lower=0)
        return np.exp(-self.xi * days_ago.to_numpy(dtype=float))

    def neg_log_likelihood(
        self,
        params: np.ndarray,
        home_idx: np.ndarray,
        away_idx: np.ndarray,
        home_goals: np.ndarray,
        away_goals: np.ndarray,
        weights: np.ndarray,
    ) -> float:
        n_teams = (len(params) - 2) // 2
        attack = params[:n_teams]
        defence = params[n_teams : 2 * n_teams]
        home = params[2 * n_teams]
        rho = params[2 * n_teams + 1]

        log_lambda = np.clip(home + attack[home_idx] - defence[away_idx], -EXPONENT_BOUND, EXPONENT_BOUND)
        log_mu = np.clip(attack[away_idx] - defence[home_idx], -EXPONENT_BOUND, EXPONENT_BOUND)
        lambda_home = np.exp(log_lambda)
        lambda_away = np.exp(log_mu)

        tau = _tau_vectorized(home_goals, away_goals, lambda_home, lambda_away, rho)
        base = np.exp(
            stats.poisson.logpmf(home_goals, lambda_home) + stats.poisson.logpmf(away_goals, lambda_away)
        )
        proba = np.maximum(base * tau, PROBA_FLOOR)
        log_lik = np.sum(weights * np.log(proba))
        return float(-log_lik + self.penalty * np.sum(attack) ** 2)

    @verify_required_column(column_names={"home_team", "away_team", "fthg", "ftag", "date"})
    def fit(
        self,
        X_train: pd.DataFrame,
        reference_date: dt.datetime | pd.Timestamp | None = None,
    ) -> DixonColesParameters:
        """Estimate the league parameters.

        Args:
            X_train: Results with columns ``home_team``, ``away_team``, ``fthg``,
                ``ftag`` and ``date``. Rows without a score are ignored.
            reference_date: Date the decay counts back from, the latest match by default.

        Returns:
            DixonColesParameters: The best point found. ``converged`` is False (and
            a :class:`NotConvergedWarning` is emitted) when the budget ran out.

        Raises:
            InvalidInputError: If fewer than two teams have played.

        """
        data = X_train.dropna(subset=["fthg", "ftag"]).reset_index(drop=True)
        teams = tuple(sorted(set(data["home_team"]) | set(data["away_team"])))
        if len(teams) < 2:
            raise InvalidInputError("At least two teams with played matches are required.")
        team_to_idx = {team: i for i, team in enumerate(teams)}
        n_teams = len(teams)

        home_idx = data["home_team"].map(team_to_idx).to_numpy(dtype=int)
        away_idx = data["away_team"].map(team_to_idx).to_numpy(dtype=int)
        home_goals = data["fthg"].to_numpy(dtype=int)
        away_goals = data["ftag"].to_numpy(dtype=int)

        dates = pd.to_datetime(data["date"])
        reference = pd.Timestamp(reference_date) if reference_date is not None else dates.max()
        weights = self.time_weights(dates, reference)

        logger.info("Fitting Dixon-Coles parameters for %d teams on %d matches", n_teams, len(data))

        x0 = np.zeros(2 * n_teams + 2)
        x0[2 * n_teams] = 0.25
        x0[2 * n_teams + 1] = -0.1
        args = (home_idx, away_idx, home_goals, away_goals, weights)
        xatol = max(self.xatol, self.rtol * max(1.0, float(np.abs(x0).max())))
        fatol = max(self.fatol, self.rtol * abs(float(self.neg_log_likelihood(x0, *args))))

        result = optimize.minimize(
            self.neg_log_likelihood,
            x0,
            args=args,
            method="Nelder-Mead",
            options={
                "maxiter": self.max_iter,
                "xatol": xatol,
                "fatol": fatol,
                "adaptive": True,
            },
        )
        if not result.success:
            logger.warning("Dixon-Coles estimation did not converge: %s", result.message)
            warnings.warn(
                f"Dixon-Coles estimation did not converge after {result.nit} iterations: "
                f"{result.message}",
                NotConvergedWarning,
                stacklevel=2,
            )

        params = result.x
        fitted = DixonColesParameters(
            attack={team: float(params[i]) for i, team in enumerate(teams)},
            defence={team: float(params[n_teams + i]) for i, team in enumerate(teams)},
            home_advantage=float(params[2 * n_teams]),
            rho=float(params[2 * n_teams + 1]),
            converged=bool(result.success),
            log_likelihood=-float(result.fun),
            n_iter=int(result.nit),
            teams=teams,
        )
        logger.info(
            "Dixon-Coles fitted: home=%.3f, rho=%.3f, converged=%s",
            fitted.home_advantage,
            fitted.rho,
            fitted.converged,
        )
        return fitted
