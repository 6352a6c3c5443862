"""
Mono-exponential sprint model.

This package contains the closed-form model equations:
- model: velocity, acceleration, distance and time predictions
- lambert: principal branch Lambert-W evaluation
- air_resistance: drag force from anthropometrics and environment
- kinetics: horizontal force and power predictions
"""

from .air_resistance import air_density, frontal_area, predict_air_resistance
from .kinetics import (
    predict_force_at_distance,
    predict_force_at_time,
    predict_power_at_distance,
    predict_power_at_time,
    predict_relative_power_at_distance,
    predict_relative_power_at_time,
)
from .lambert import lambert_w0
from .model import (
    mono_exponential_acceleration,
    mono_exponential_distance,
    mono_exponential_time,
    mono_exponential_velocity,
    predict_acceleration_at_distance,
    predict_acceleration_at_time,
    predict_distance_at_time,
    predict_time_at_distance,
    predict_velocity_at_distance,
    predict_velocity_at_time,
)

__all__ = [
    "air_density",
    "frontal_area",
    "lambert_w0",
    "mono_exponential_acceleration",
    "mono_exponential_distance",
    "mono_exponential_time",
    "mono_exponential_velocity",
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
]
