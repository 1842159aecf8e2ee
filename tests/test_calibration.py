import numpy as np
import pytest

from prognostix.calibration import CalibrationEngine, CalibrationSample
from prognostix.data_io.records import CalibrationParameters
from prognostix.utils.errors import InvalidInputError


@pytest.fixture
def engine():
    return CalibrationEngine()


class TestCalibrate:
    def test_neutral_parameters(self):
        assert CalibrationEngine.calibrate(50.0, 0.0, 0.0) == pytest.approx(50.0)

    def test_decreasing_in_linear_term(self):
        # with a = 1, a*p + b grows with p
        values = [CalibrationEngine.calibrate(p, 1.0, -0.5) for p in np.linspace(0, 100, 11)]
        assert all(x > y for x, y in zip(values, values[1:]))

    def test_default_parameters_increase_with_raw_probability(self, engine):
        params = CalibrationParameters()
        low = engine.calibrate_with(30.0, params)
        high = engine.calibrate_with(70.0, params)
        assert low == pytest.approx(100 / (1 + np.exp(-8.5 * 0.3 + 4.2)))
        assert low < high

    def test_bounded(self):
        for p in (0.0, 100.0):
            assert 0.0 <= CalibrationEngine.calibrate(p, -8.5, 4.2) <= 100.0

    def test_non_finite_raises(self):
        with pytest.raises(InvalidInputError):
            CalibrationEngine.calibrate(float("nan"), 0.0, 0.0)


class TestUpdateParameters:
    def test_overconfident_raises_b(self, engine):
        params = CalibrationParameters(a=-8.5, b=4.2)
        samples = [CalibrationSample(0.8, 0.0), CalibrationSample(0.6, 1.0)]
        updated = engine.update_parameters(params, samples)
        assert updated.b == pytest.approx(4.3)
        assert updated.a == params.a
        assert params.b == 4.2

    def test_underconfident_unchanged(self, engine):
        params = CalibrationParameters()
        samples = [CalibrationSample(0.2, 1.0), CalibrationSample(0.4, 0.0)]
        assert engine.update_parameters(params, samples) is params

    def test_empty_samples_unchanged(self, engine):
        params = CalibrationParameters()
        assert engine.update_parameters(params, []) is params

    def test_custom_step(self):
        updated = CalibrationEngine(step=0.25).update_parameters(
            CalibrationParameters(b=0.0), [CalibrationSample(0.9, 0.0)]
        )
        assert updated.b == pytest.approx(0.25)

    def test_invalid_sample(self, engine):
        with pytest.raises(InvalidInputError):
            engine.update_parameters(CalibrationParameters(), [CalibrationSample(1.2, 1.0)])


class TestReliabilityTable:
    def test_bins(self):
        samples = [
            CalibrationSample(0.05, 0.0),
            CalibrationSample(0.15, 1.0),
            CalibrationSample(0.95, 1.0),
            CalibrationSample(1.0, 1.0),
        ]
        table = CalibrationEngine.reliability_table(samples, n_bins=10)
        assert list(table["count"]) == [1, 1, 2]
        last = table.iloc[-1]
        assert last["bin_lower"] == pytest.approx(0.9)
        assert last["mean_predicted"] == pytest.approx(0.975)
        assert last["observed_frequency"] == 1.0

    def test_invalid_bins(self):
        with pytest.raises(InvalidInputError):
            CalibrationEngine.reliability_table([], n_bins=0)
