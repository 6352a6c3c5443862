"""
Horizontal force and power predicted from the mono-exponential model.

With a body mass, net horizontal force is ``m * a + F_air`` and power is force
times velocity. Without a body mass the functions run in kinematics-only mode:
force is mass-specific (equal to acceleration) and drag is ignored, so the
peak of relative power equals PMAX = MSS * MAC / 4.
"""

import numpy as np

from ..constants import AnthropometricDefaults
from ..models import Environment
from .air_resistance import predict_air_resistance
from .model import (
    ArrayLike,
    predict_acceleration_at_time,
    predict_time_at_distance,
    predict_velocity_at_time,
)


# pylint: disable=C0103,R0913
def predict_force_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """
    Predict net horizontal force at observed time.

    Args:
        time: Observed time(s) in seconds
        MSS: Maximal sprinting speed
        TAU: Relative acceleration time constant
        time_correction: Time correction, see :mod:`.model`
        distance_correction: Distance correction, see :mod:`.model`
        bodymass: Body mass in kg, ``None`` for mass-specific force
        bodyheight: Body height in m
        environment: Environmental conditions for air resistance

    Returns:
        Force in N (or N/kg without body mass)
    """
    acceleration = predict_acceleration_at_time(
        time, MSS, TAU, time_correction, distance_correction
    )
    if bodymass is None:
        return acceleration

    velocity = predict_velocity_at_time(
        time, MSS, TAU, time_correction, distance_correction
    )
    air_resistance = predict_air_resistance(
        velocity, bodymass=bodymass, bodyheight=bodyheight, environment=environment
    )
    return acceleration * bodymass + air_resistance


def predict_power_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """Predict horizontal power (W, or W/kg without body mass) at observed time."""
    force = predict_force_at_time(
        time,
        MSS,
        TAU,
        time_correction,
        distance_correction,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
    )
    velocity = predict_velocity_at_time(
        time, MSS, TAU, time_correction, distance_correction
    )
    return force * velocity


def predict_relative_power_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """Predict power per kg body mass at observed time."""
    power = predict_power_at_time(
        time,
        MSS,
        TAU,
        time_correction,
        distance_correction,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
    )
    if bodymass is None:
        return power
    return power / bodymass


def predict_force_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """Predict net horizontal force at observed distance."""
    time = predict_time_at_distance(
        distance, MSS, TAU, time_correction, distance_correction
    )
    return predict_force_at_time(
        time,
        MSS,
        TAU,
        time_correction,
        distance_correction,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
    )


def predict_power_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """Predict horizontal power at observed distance."""
    time = predict_time_at_distance(
        distance, MSS, TAU, time_correction, distance_correction
    )
    return predict_power_at_time(
        time,
        MSS,
        TAU,
        time_correction,
        distance_correction,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
    )


def predict_relative_power_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """Predict power per kg body mass at observed distance."""
    time = predict_time_at_distance(
        distance, MSS, TAU, time_correction, distance_correction
    )
    return predict_relative_power_at_time(
        time,
        MSS,
        TAU,
        time_correction,
        distance_correction,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
    )
