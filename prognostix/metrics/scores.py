import matplotlib.pyplot as plt
import numpy as np

from prognostix.metrics.abc_metric import Metric
from prognostix.metrics.metrics_function import brier_score, rps
from prognostix.utils.typing import ArrayLikeF


class _HistogramMetric(Metric):
    label: str
    _values: list[float]

    def __init__(self) -> None:
        super().__init__()
        self.add_state("_values")

    def __len__(self) -> int:
        return len(self._values)

    def compute(self) -> tuple[float, float]:
        """Mean and standard deviation of the accumulated scores, ``nan`` when empty."""
        if not self._values:
            return float("nan"), float("nan")
        return float(np.mean(self._values)), float(np.std(self._values))

    def visualize(self, n_bins: int) -> None:
        fig = plt.figure()
        ax = fig.add_subplot(1, 1, 1)
        ax.hist(self._values, bins=n_bins, edgecolor="black")
        ax.set_xlabel(self.label)
        ax.set_ylabel("Count")
        plt.show()


class BrierScore(_HistogramMetric):
    higher_is_better = False
    label = "Brier score"

    def __call__(self, probas: ArrayLikeF, outcome_idx: int) -> None:
        self._values.append(brier_score(probas, outcome_idx))


class RPS(_HistogramMetric):
    higher_is_better = False
    label = "RPS"

    def __call__(self, probas: ArrayLikeF, outcome_idx: int) -> None:
        self._values.append(rps(probas, outcome_idx))
