"""Probability calibration.

Exported names:
    - CalibrationEngine: logistic (Platt-style) remapping and its bias correction
    - CalibrationSample: one (predicted probability, observed outcome) pair

"""

from .platt import CalibrationEngine, CalibrationSample

__all__ = ["CalibrationEngine", "CalibrationSample"]
