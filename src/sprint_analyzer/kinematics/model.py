"""
Mono-exponential sprint kinematics.

Velocity rises towards maximal sprinting speed (MSS) with time constant TAU:

    v(t) = MSS * (1 - exp(-t / TAU))
    a(t) = MSS / TAU * exp(-t / TAU)
    d(t) = MSS * (t + TAU * exp(-t / TAU)) - MSS * TAU
    t(d) = TAU * W0(-exp(-d / (MSS * TAU) - 1)) + d / MSS + TAU

The ``mono_exponential_*`` functions evaluate the raw equations without
validation and are used inside the solvers. The ``predict_*`` functions are the
public API: they validate their inputs and apply the corrections.

Corrections are applied identically everywhere. An observed time ``t`` and
distance ``d`` map onto the model axes as ``t + time_correction`` and
``d + distance_correction``.
"""

import numpy as np

from ..exceptions import DomainError
from .lambert import lambert_w0, lambert_w0_or_nan

ArrayLike = np.ndarray | list[float] | float


# pylint: disable=C0103  # Allow MSS/TAU names for the mathematical functions.
def mono_exponential_velocity(
    time: np.ndarray | float, MSS: float, TAU: float
) -> np.ndarray | float:
    """Velocity at model time ``time``."""
    return -MSS * np.expm1(-time / TAU)


def mono_exponential_acceleration(
    time: np.ndarray | float, MSS: float, TAU: float
) -> np.ndarray | float:
    """Acceleration at model time ``time``."""
    return MSS / TAU * np.exp(-time / TAU)


def mono_exponential_distance(
    time: np.ndarray | float, MSS: float, TAU: float
) -> np.ndarray | float:
    """Distance covered at model time ``time``."""
    return MSS * (time + TAU * np.expm1(-time / TAU))


def mono_exponential_time(
    distance: np.ndarray | float, MSS: float, TAU: float
) -> np.ndarray | float:
    """
    Time needed to cover model distance ``distance``.

    Returns NaN where the Lambert-W argument leaves the principal branch
    domain, so that solvers can reject such trial steps.
    """
    w = lambert_w0_or_nan(-np.exp(-distance / (MSS * TAU) - 1))
    return TAU * w + distance / MSS + TAU


def predict_velocity_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """
    Predict velocity at observed time.

    Args:
        time: Observed time(s) in seconds
        MSS: Maximal sprinting speed in m/s
        TAU: Relative acceleration time constant in s
        time_correction: Added to ``time`` before evaluating the model
        distance_correction: Accepted for a uniform signature, velocity over
            time does not depend on it

    Returns:
        Velocity in m/s, same shape as ``time``
    """
    t = _coordinate(time, "time") + time_correction
    _check_parameters(MSS, TAU)
    return _output(mono_exponential_velocity(t, MSS, TAU), time)


def predict_acceleration_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """Predict acceleration (m/s^2) at observed time."""
    t = _coordinate(time, "time") + time_correction
    _check_parameters(MSS, TAU)
    return _output(mono_exponential_acceleration(t, MSS, TAU), time)


def predict_distance_at_time(
    time: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """
    Predict observed distance at observed time.

    The model distance at ``time + time_correction`` is shifted back by
    ``distance_correction``, which makes this the exact inverse of
    :func:`predict_time_at_distance` for the same corrections.
    """
    t = _coordinate(time, "time") + time_correction
    _check_parameters(MSS, TAU)
    distance = mono_exponential_distance(t, MSS, TAU) - distance_correction
    return _output(distance, time)


def predict_time_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """
    Predict observed time at observed distance.

    Solves the distance-time relation with the principal branch of the
    Lambert-W function, then subtracts ``time_correction``.

    Args:
        distance: Observed distance(s) in meters
        MSS: Maximal sprinting speed in m/s
        TAU: Relative acceleration time constant in s
        time_correction: Subtracted from the model time
        distance_correction: Added to ``distance`` before inversion

    Returns:
        Time in seconds, same shape as ``distance``

    Raises:
        DomainError: If a corrected distance is negative, which puts the
            Lambert-W argument below -1/e
    """
    d = _coordinate(distance, "distance") + distance_correction
    _check_parameters(MSS, TAU)
    if np.any(d < 0):
        raise DomainError(
            "Corrected distance must be non-negative, got minimum "
            f"{float(np.min(d))!r}"
        )
    w = lambert_w0(-np.exp(-d / (MSS * TAU) - 1))
    time = TAU * w + d / MSS + TAU - time_correction
    return _output(time, distance)


def predict_velocity_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """Predict velocity (m/s) at observed distance."""
    time = predict_time_at_distance(
        distance, MSS, TAU, time_correction, distance_correction
    )
    return predict_velocity_at_time(
        time, MSS, TAU, time_correction, distance_correction
    )


def predict_acceleration_at_distance(
    distance: ArrayLike,
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
) -> np.ndarray | float:
    """Predict acceleration (m/s^2) at observed distance."""
    time = predict_time_at_distance(
        distance, MSS, TAU, time_correction, distance_correction
    )
    return predict_acceleration_at_time(
        time, MSS, TAU, time_correction, distance_correction
    )


def _coordinate(values: ArrayLike, name: str) -> np.ndarray:
    """Convert a primary coordinate to a float array and reject non-finite input."""
    array = np.asarray(values, dtype=float)
    if not np.all(np.isfinite(array)):
        raise DomainError(f"{name} must be finite")
    return array


def _check_parameters(MSS: float, TAU: float) -> None:
    if not (np.isfinite(MSS) and MSS > 0):
        raise DomainError(f"MSS must be positive and finite, got {MSS!r}")
    if not (np.isfinite(TAU) and TAU > 0):
        raise DomainError(f"TAU must be positive and finite, got {TAU!r}")


def _output(result: np.ndarray | float, reference: ArrayLike) -> np.ndarray | float:
    """Return a float for scalar input and an array otherwise."""
    if np.ndim(reference) == 0:
        return float(result)
    return np.asarray(result, dtype=float)
