"""
Air resistance acting on a sprinting athlete.

Drag is modeled as ``F = 0.5 * rho * A * Cd * (v - w) * |v - w|`` where the
air density ``rho`` follows from barometric pressure and temperature and the
frontal area ``A`` from a body height/mass regression.
"""

import numpy as np

from ..constants import AnthropometricDefaults, PhysicalConstants
from ..exceptions import DomainError
from ..models import Environment


def air_density(environment: Environment | None = None) -> float:
    """
    Air density in kg/m^3 for the given conditions.

    Args:
        environment: Pressure and temperature; defaults to sea level at 25 deg C

    Returns:
        Air density
    """
    env = environment or Environment()
    return (
        PhysicalConstants.AIR_DENSITY_STP
        * (env.barometric_pressure / PhysicalConstants.STANDARD_PRESSURE)
        * (
            PhysicalConstants.ZERO_CELSIUS_KELVIN
            / (PhysicalConstants.ZERO_CELSIUS_KELVIN + env.air_temperature)
        )
    )


def frontal_area(bodymass: float, bodyheight: float) -> float:
    """Projected frontal area in m^2 from body mass (kg) and height (m)."""
    if bodymass <= 0 or bodyheight <= 0:
        raise DomainError("Body mass and body height must be positive")
    body_surface_area = (
        PhysicalConstants.BSA_COEFFICIENT
        * bodyheight**PhysicalConstants.BSA_HEIGHT_EXPONENT
        * bodymass**PhysicalConstants.BSA_MASS_EXPONENT
    )
    return body_surface_area * PhysicalConstants.FRONTAL_AREA_FRACTION


def drag_constant(
    bodymass: float,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> float:
    """Constant ``k`` in ``F_air = k * v_rel * |v_rel|``."""
    return (
        0.5
        * air_density(environment)
        * frontal_area(bodymass, bodyheight)
        * PhysicalConstants.DRAG_COEFFICIENT
    )


def predict_air_resistance(
    velocity: np.ndarray | list[float] | float,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
) -> np.ndarray | float:
    """
    Predict air resistance force opposing the athlete.

    Args:
        velocity: Athlete velocity in m/s
        bodymass: Body mass in kg; ``None`` selects kinematics-only mode, in
            which drag is zero
        bodyheight: Body height in m
        environment: Pressure, temperature and wind conditions

    Returns:
        Drag force in N, same shape as ``velocity``
    """
    v = np.asarray(velocity, dtype=float)
    if bodymass is None:
        force = np.zeros_like(v)
    else:
        env = environment or Environment()
        relative_velocity = v - env.wind_velocity
        k = drag_constant(bodymass, bodyheight, env)
        force = k * relative_velocity * np.abs(relative_velocity)

    if np.ndim(velocity) == 0:
        return float(force)
    return force
