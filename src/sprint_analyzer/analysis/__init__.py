"""
Derived summaries of fitted sprint parameters.

This package contains modules computing critical points and force-velocity
profiles from MSS and TAU.
"""

from .critical_points import (
    find_acceleration_critical_distance,
    find_acceleration_critical_time,
    find_max_power_distance,
    find_max_power_time,
    find_power_critical_distance,
    find_power_critical_time,
    find_velocity_critical_distance,
    find_velocity_critical_time,
)
from .force_velocity import make_fv_profile, simulate_sprint

__all__ = [
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
]
