"""Sprint Analyzer - a package for estimating short sprint parameters."""

__version__ = "1.0.0"

from . import analysis, constants, data, estimation, exceptions, kinematics, models
from .analysis import (
    find_acceleration_critical_distance,
    find_acceleration_critical_time,
    find_max_power_distance,
    find_max_power_time,
    find_power_critical_distance,
    find_power_critical_time,
    find_velocity_critical_distance,
    find_velocity_critical_time,
    make_fv_profile,
    simulate_sprint,
)
from .estimation import (
    MixedEffectsEstimator,
    RadarEstimator,
    SplitTimeEstimator,
    fit_mixed_radar,
    fit_mixed_radar_with_time_correction,
    fit_mixed_splits,
    fit_mixed_splits_with_corrections,
    fit_mixed_splits_with_time_correction,
    fit_radar,
    fit_radar_with_time_correction,
    fit_splits,
    fit_splits_with_corrections,
    fit_splits_with_time_correction,
)
from .kinematics import (
    predict_acceleration_at_distance,
    predict_acceleration_at_time,
    predict_air_resistance,
    predict_distance_at_time,
    predict_force_at_distance,
    predict_force_at_time,
    predict_power_at_distance,
    predict_power_at_time,
    predict_relative_power_at_distance,
    predict_relative_power_at_time,
    predict_time_at_distance,
    predict_velocity_at_distance,
    predict_velocity_at_time,
)
from .models import (
    Correction,
    Environment,
    FitResult,
    FVProfile,
    LOOCVResult,
    MixedFitResult,
    ModelFit,
    ParameterSet,
)
from .settings import Settings, load_settings


def get_version() -> str:
    """Get the current version of sprint_analyzer."""
    return __version__


def get_package_info() -> dict[str, str]:
    """Get package information including name and version."""
    return {
        "name": "sprint-analyzer",
        "version": __version__,
        "description": "A package for estimating short sprint parameters",
    }


__all__ = [
    # Version & Info
    "get_version",
    "get_package_info",
    # Models
    "Correction",
    "Environment",
    "FitResult",
    "FVProfile",
    "LOOCVResult",
    "MixedFitResult",
    "ModelFit",
    "ParameterSet",
    # Settings
    "Settings",
    "load_settings",
    # Kinematics
    "predict_acceleration_at_distance",
    "predict_acceleration_at_time",
    "predict_air_resistance",
    "predict_distance_at_time",
    "predict_force_at_distance",
    "predict_force_at_time",
    "predict_power_at_distance",
    "predict_power_at_time",
    "predict_relative_power_at_distance",
    "predict_relative_power_at_time",
    "predict_time_at_distance",
    "predict_velocity_at_distance",
    "predict_velocity_at_time",
    # Estimators
    "MixedEffectsEstimator",
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
    # Analysis
    "find_acceleration_critical_distance",
    "find_acceleration_critical_time",
    "find_max_power_distance",
    "find_max_power_time",
    "find_power_critical_distance",
    "find_power_critical_time",
    "find_velocity_critical_distance",
    "find_velocity_critical_time",
    "make_fv_profile",
    "simulate_sprint",
    # Modules
    "analysis",
    "constants",
    "data",
    "estimation",
    "exceptions",
    "kinematics",
    "models",
]
