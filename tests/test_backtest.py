import math

import pytest

from prognostix.backtest import BacktestRecord, BacktestReport, Backtester
from prognostix.data_io.history import MatchHistory
from prognostix.data_io.records import CalibrationParameters, MatchDetailStats
from prognostix.models.prediction import PredictionEngine


class TestRunBacktest:
    def test_skips_matches_without_history(self, small_history):
        report = Backtester(small_history).run_backtest("2024-01-01", "2024-01-31")
        # m1 and m2 open the season, m6 is not played
        assert report.n_skipped == 2
        assert [r.match_id for r in report.records] == ["m3", "m4", "m5"]
        assert len(report.calibration_samples) == 3 * report.n_matches

    def test_mean_brier_score(self, small_history):
        report = Backtester(small_history).run_backtest("2024-01-01", "2024-01-31")
        assert 0.0 < report.mean_brier_score < 2 / 3
        assert report.mean_brier_score == pytest.approx(
            sum(r.brier_score for r in report.records) / report.n_matches
        )
        assert report.mean_log_loss > 0
        assert 0.0 <= report.accuracy <= 1.0

    def test_no_look_ahead(self, small_history, make_match):
        target = small_history["m5"]
        baseline = Backtester(small_history).run_backtest(target.date, target.date)

        leaked = MatchHistory(list(small_history))
        leaked.add(make_match("D", "A", 30, 7, 0, match_id="blowout"))
        leaked.add(make_match("A", "D", 19.5, 0, 6, match_id="same_day_later"))
        report = Backtester(leaked).run_backtest(target.date, target.date)

        assert report.records[0].match_id == "m5"
        assert report.records[0].probabilities == baseline.records[0].probabilities
        assert report.records[0].brier_score == baseline.records[0].brier_score

    def test_range_without_matches(self, small_history):
        report = Backtester(small_history).run_backtest("2023-01-01", "2023-06-30")
        assert report.n_matches == 0
        assert math.isnan(report.mean_brier_score)
        assert report.to_frame().empty

    def test_report_frame(self, small_history):
        frame = Backtester(small_history, show_progress=False).run_backtest(
            "2024-01-01", "2024-01-31"
        ).to_frame()
        assert list(frame["match_id"]) == ["m3", "m4", "m5"]
        assert (frame[["proba_home", "proba_draw", "proba_away"]].sum(axis=1) - 1.0).abs().max() < 1e-3

    def test_calibrated_engine(self, small_history):
        engine = PredictionEngine(calibration=CalibrationParameters())
        report = Backtester(small_history, engine).run_backtest("2024-01-01", "2024-01-31")
        assert report.n_matches == 3


class TestEvaluateMatch:
    def test_single_match(self, small_history):
        record = Backtester(small_history).evaluate_match(small_history["m5"])
        assert record.outcome == 0
        assert sum(record.probabilities) == pytest.approx(1.0, abs=1e-3)
        assert record.brier_score == pytest.approx(
            ((record.probabilities[0] - 1) ** 2 + record.probabilities[1] ** 2 + record.probabilities[2] ** 2)
            / 3
        )

    def test_first_match_cannot_be_predicted(self, small_history):
        assert Backtester(small_history).evaluate_match(small_history["m1"]) is None

    def test_recent_limit(self, small_history):
        limited = Backtester(small_history, recent_limit=1).predict_before(small_history["m5"])
        full = Backtester(small_history, recent_limit=None).predict_before(small_history["m5"])
        assert limited != full

    def test_detail_statistics_feed_the_forecast(self, make_match):
        rich = MatchDetailStats(
            xgot=2.6,
            big_chances=5,
            shots=10,
            shots_on_target=6,
            possession=60.0,
            passes_total=500,
            passes_completed=450,
        )

        def season(home_detail=None):
            return MatchHistory(
                [
                    make_match("A", "B", 1, 1, 1, match_id="r1", home_detail=home_detail),
                    make_match("A", "C", 8, 1, 1, match_id="r2", home_detail=home_detail),
                    make_match("A", "E", 15, 1, 1, match_id="r3", home_detail=home_detail),
                    make_match("D", "B", 1, 1, 0, match_id="r4"),
                    make_match("C", "D", 8, 1, 1, match_id="r5"),
                    make_match("A", "D", 22, 2, 0, match_id="target"),
                ]
            )

        plain_history, rich_history = season(), season(rich)
        plain = Backtester(plain_history).predict_before(plain_history["target"])
        boosted = Backtester(rich_history).predict_before(rich_history["target"])
        assert boosted.home_win_probability > plain.home_win_probability
        assert boosted.predicted_home_goals > plain.predicted_home_goals


class TestBacktestReport:
    def test_samples_flag_the_outcome(self):
        report = BacktestReport()
        report.add(
            BacktestRecord("x", None, "A", "B", (0.5, 0.3, 0.2), 1, 0.2, 1.2, True)  # type: ignore[arg-type]
        )
        assert [s.actual for s in report.calibration_samples] == [0.0, 1.0, 0.0]
        assert [s.predicted for s in report.calibration_samples] == [0.5, 0.3, 0.2]
