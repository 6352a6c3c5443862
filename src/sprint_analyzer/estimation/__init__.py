"""
Parameter estimation layer.

This package contains the estimators fitting the mono-exponential model to
split times, radar traces and multi-athlete data, together with the
equation templates and numerical solvers they share.
"""

from .base import BaseEstimator
from .equations import ModelEquation
from .mixed import (
    MixedEffectsEstimator,
    fit_mixed_radar,
    fit_mixed_radar_with_time_correction,
    fit_mixed_splits,
    fit_mixed_splits_with_corrections,
    fit_mixed_splits_with_time_correction,
)
from .radar import RadarEstimator, fit_radar, fit_radar_with_time_correction
from .solvers import (
    LeastSquaresSolver,
    MixedSolverProtocol,
    NonlinearSolverProtocol,
    PenalizedMixedSolver,
)
from .splits import (
    SplitTimeEstimator,
    fit_splits,
    fit_splits_with_corrections,
    fit_splits_with_time_correction,
)

__all__ = [
    "BaseEstimator",
    "LeastSquaresSolver",
    "MixedEffectsEstimator",
    "MixedSolverProtocol",
    "ModelEquation",
    "NonlinearSolverProtocol",
    "PenalizedMixedSolver",
    "RadarEstimator",
    "SplitTimeEstimator",
    "fit_mixed_radar",
    "fit_mixed_radar_with_time_correction",
    "fit_mixed_splits",
    "fit_mixed_splits_with_corrections",
    "fit_mixed_splits_with_time_correction",
    "fit_radar",
    "fit_radar_with_time_correction",
    "fit_splits",
    "fit_splits_with_corrections",
    "fit_splits_with_time_correction",
]
