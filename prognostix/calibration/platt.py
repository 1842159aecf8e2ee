from __future__ import annotations

import dataclasses
import logging
import math
from typing import NamedTuple, Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.special import expit

from prognostix.data_io.records import CalibrationParameters
from prognostix.utils.errors import InvalidInputError

logger = logging.getLogger(name=__name__)


class CalibrationSample(NamedTuple):
    """A predicted probability (in [0, 1]) and the 0/1 indicator of the outcome."""

    predicted: float
    actual: float


def _as_arrays(samples: Sequence[CalibrationSample]) -> tuple[np.ndarray, np.ndarray]:
    predicted = np.asarray([s.predicted for s in samples], dtype=float)
    actual = np.asarray([s.actual for s in samples], dtype=float)
    if np.any((predicted < 0) | (predicted > 1)) or not np.all(np.isfinite(predicted)):
        raise InvalidInputError("Predicted probabilities must lie in [0, 1].")
    if np.any((actual < 0) | (actual > 1)):
        raise InvalidInputError("Outcome indicators must lie in [0, 1].")
    return predicted, actual


class CalibrationEngine:
    """Logistic remapping ``1 / (1 + exp(a*p + b))`` of raw probabilities.

    The ``(a, b)`` pair is not fitted by maximum likelihood: :meth:`update_parameters`
    is a bias correction that raises ``b`` by a fixed step whenever the model has
    been overconfident on the collected samples.
    """

    def __init__(self, step: float = 0.1) -> None:
        if step <= 0:
            raise InvalidInputError("step must be positive.")
        self.step = step

    @staticmethod
    def calibrate(raw_probability: float, a: float, b: float) -> float:
        """Calibrated probability in percent from a raw probability in percent."""
        if not math.isfinite(raw_probability):
            raise InvalidInputError("Probability must be finite.")
        p = raw_probability / 100.0
        return float(expit(-(a * p + b))) * 100.0

    def calibrate_with(self, raw_probability: float, params: CalibrationParameters) -> float:
        return self.calibrate(raw_probability, params.a, params.b)

    def update_parameters(
        self, params: CalibrationParameters, samples: Sequence[CalibrationSample]
    ) -> CalibrationParameters:
        """Return the parameters corrected from backtest samples.

        If the mean predicted probability exceeds the mean observed frequency, ``b``
        is raised by ``step`` to damp future probabilities; otherwise the
        parameters are returned unchanged.
        """
        if not samples:
            logger.info("No calibration sample, parameters left unchanged")
            return params
        predicted, actual = _as_arrays(samples)
        mean_predicted, mean_actual = float(predicted.mean()), float(actual.mean())
        if mean_predicted > mean_actual:
            logger.info(
                "Overconfident model (%.3f predicted vs %.3f observed), raising b to %.2f",
                mean_predicted,
                mean_actual,
                params.b + self.step,
            )
            return dataclasses.replace(params, b=params.b + self.step)
        return params

    @staticmethod
    def reliability_table(samples: Sequence[CalibrationSample], n_bins: int = 10) -> pd.DataFrame:
        """Mean predicted probability against observed frequency, per probability bin.

        Empty bins are dropped. The last bin is closed so a probability of one is kept.
        """
        if n_bins < 1:
            raise InvalidInputError("n_bins must be at least 1.")
        predicted, actual = _as_arrays(samples)
        bins = np.minimum((predicted * n_bins).astype(int), n_bins - 1)

        rows = []
        for i in range(n_bins):
            in_bin = bins == i
            count = int(in_bin.sum())
            if count == 0:
                continue
            rows.append(
                {
                    "bin_lower": i / n_bins,
                    "bin_upper": (i + 1) / n_bins,
                    "mean_predicted": float(predicted[in_bin].mean()),
                    "observed_frequency": float(actual[in_bin].mean()),
                    "count": count,
                }
            )
        return pd.DataFrame(
            rows,
            columns=["bin_lower", "bin_upper", "mean_predicted", "observed_frequency", "count"],
        )

    def plot_reliability(self, samples: Sequence[CalibrationSample], n_bins: int = 10) -> None:
        table = self.reliability_table(samples, n_bins=n_bins)
        fig = plt.figure()
        ax = fig.add_subplot(1, 1, 1)
        ax.plot([0, 1], [0, 1], linestyle="--", color="grey")
        ax.plot(table["mean_predicted"], table["observed_frequency"], marker="o")
        ax.set_xlabel("Mean predicted probability")
        ax.set_ylabel("Observed frequency")
        plt.show()
