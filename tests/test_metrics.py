import math

import numpy as np
import pytest

from prognostix.data_io.records import PredictionResult
from prognostix.metrics import (
    RPS,
    BrierScore,
    actual_outcome,
    brier_score,
    evaluate_prediction,
    log_loss,
    rps,
)
from prognostix.utils.errors import InvalidInputError


class TestFunctional:
    def test_brier_perfect(self):
        assert brier_score([1.0, 0.0, 0.0], 0) == 0.0

    def test_brier_uniform(self):
        assert brier_score([1 / 3, 1 / 3, 1 / 3], 0) == pytest.approx(2 / 9)

    def test_brier_worst(self):
        assert brier_score([0.0, 0.0, 1.0], 0) == pytest.approx(2 / 3)

    def test_log_loss(self):
        assert log_loss([0.5, 0.3, 0.2], 1) == pytest.approx(-math.log(0.3))
        assert np.isfinite(log_loss([1.0, 0.0, 0.0], 2))

    def test_rps(self):
        assert rps([1.0, 0.0, 0.0], 0) == 0.0
        assert rps([0.0, 0.0, 1.0], 0) == pytest.approx(1.0)

    def test_invalid_inputs(self):
        with pytest.raises(InvalidInputError):
            brier_score([0.5, 0.5], 0)
        with pytest.raises(InvalidInputError):
            rps([0.2, 0.3, 0.5], 3)


class TestMetricClasses:
    def test_brier_accumulates(self):
        metric = BrierScore()
        metric([1.0, 0.0, 0.0], 0)
        metric([0.0, 0.0, 1.0], 0)
        mean, std = metric.compute()
        assert mean == pytest.approx(1 / 3)
        assert std == pytest.approx(1 / 3)
        assert not metric.higher_is_better

    def test_reset(self):
        metric = RPS()
        metric([0.5, 0.3, 0.2], 1)
        metric.reset()
        assert len(metric) == 0
        assert all(np.isnan(metric.compute()))


def _prediction(home, draw, away):
    return PredictionResult(home, draw, away, 100.0, 90.0)


class TestEvaluatePrediction:
    def test_brier_and_correctness(self):
        result = evaluate_prediction(_prediction(50.0, 25.0, 25.0), 2, 1)
        assert result.brier_score == 0.125
        assert result.prediction_correct is True
        assert result.is_evaluated

    @pytest.mark.parametrize(
        "probas, score, expected",
        [
            ((45.0, 30.0, 25.0), (1, 1), True),
            ((47.0, 28.0, 25.0), (1, 1), False),
            ((45.0, 15.0, 40.0), (0, 2), True),
            ((40.0, 25.0, 35.0), (0, 2), False),
            ((25.0, 35.0, 40.0), (2, 0), False),
            ((25.0, 34.0, 41.0), (1, 1), True),
        ],
    )
    def test_asymmetric_thresholds(self, probas, score, expected):
        assert evaluate_prediction(_prediction(*probas), *score).prediction_correct is expected

    def test_already_evaluated(self):
        result = evaluate_prediction(_prediction(50.0, 25.0, 25.0), 0, 0)
        with pytest.raises(InvalidInputError):
            evaluate_prediction(result, 1, 0)

    def test_actual_outcome(self):
        assert actual_outcome(0, 0) == 1
        with pytest.raises(InvalidInputError):
            actual_outcome(-1, 0)
