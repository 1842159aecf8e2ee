"""Walk-forward evaluation of the prediction engine.

Exported classes:
    - Backtester: replays a history without look-ahead
    - BacktestReport: per-match scores and their means
    - BacktestRecord: one evaluated match

"""

from .backtester import BacktestRecord, BacktestReport, Backtester

__all__ = ["BacktestRecord", "BacktestReport", "Backtester"]
