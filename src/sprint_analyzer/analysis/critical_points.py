"""
Critical points of the mono-exponential sprint model.

Two families of bounded numerical searches are provided:
- maximum finders locating the time/distance of peak power
- threshold finders locating where velocity reaches, acceleration decays to,
  or power stays above a fraction of its reference value

All searches run inside a finite horizon and raise ``DomainError`` when the
requested crossing does not exist in that range.
"""

import logging
from collections.abc import Callable

import numpy as np
from scipy.optimize import brentq, minimize_scalar

from ..constants import AnthropometricDefaults, SearchHorizons
from ..exceptions import ConvergenceError, DomainError
from ..kinematics.kinetics import predict_power_at_distance, predict_power_at_time
from ..kinematics.model import (
    predict_acceleration_at_distance,
    predict_acceleration_at_time,
    predict_velocity_at_distance,
    predict_velocity_at_time,
)
from ..models import Environment

logger = logging.getLogger(__name__)


# pylint: disable=C0103,R0913
def find_max_power_time(
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    horizon: float = SearchHorizons.TIME_HORIZON,
) -> dict[str, float]:
    """
    Find the time at which horizontal power peaks.

    Args:
        MSS: Maximal sprinting speed
        TAU: Relative acceleration time constant
        time_correction: Time correction
        distance_correction: Distance correction
        bodymass: Body mass in kg, ``None`` for relative kinematic power
        bodyheight: Body height in m
        environment: Environmental conditions for air resistance
        horizon: Upper end of the searched time range in s

    Returns:
        Dictionary with 'max_power' and 'time' keys
    """
    lower = _lower_bound(time_correction, horizon)

    def power(t: float) -> float:
        return predict_power_at_time(
            t,
            MSS,
            TAU,
            time_correction,
            distance_correction,
            bodymass=bodymass,
            bodyheight=bodyheight,
            environment=environment,
        )

    time, max_power = _maximize(power, lower, horizon)
    return {"max_power": max_power, "time": time}


def find_max_power_distance(
    MSS: float,
    TAU: float,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    horizon: float = SearchHorizons.DISTANCE_HORIZON,
) -> dict[str, float]:
    """
    Find the distance at which horizontal power peaks.

    Returns:
        Dictionary with 'max_power' and 'distance' keys
    """
    lower = _lower_bound(distance_correction, horizon)

    def power(d: float) -> float:
        return predict_power_at_distance(
            d,
            MSS,
            TAU,
            time_correction,
            distance_correction,
            bodymass=bodymass,
            bodyheight=bodyheight,
            environment=environment,
        )

    distance, max_power = _maximize(power, lower, horizon)
    return {"max_power": max_power, "distance": distance}


def find_velocity_critical_time(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    horizon: float = SearchHorizons.TIME_HORIZON,
) -> float:
    """
    Find the time at which velocity first reaches ``percent`` of MSS.

    Raises:
        DomainError: If ``percent`` is not in (0, 1) or no crossing exists
            within the horizon
    """
    _check_fraction(percent)
    target = percent * MSS

    def excess(t: float) -> float:
        velocity = predict_velocity_at_time(
            t, MSS, TAU, time_correction, distance_correction
        )
        return velocity - target

    lower = _lower_bound(time_correction, horizon)
    return _bounded_root(excess, lower, horizon, "velocity")


def find_velocity_critical_distance(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    horizon: float = SearchHorizons.DISTANCE_HORIZON,
) -> float:
    """Find the distance at which velocity first reaches ``percent`` of MSS."""
    _check_fraction(percent)
    target = percent * MSS

    def excess(d: float) -> float:
        velocity = predict_velocity_at_distance(
            d, MSS, TAU, time_correction, distance_correction
        )
        return velocity - target

    lower = _lower_bound(distance_correction, horizon)
    return _bounded_root(excess, lower, horizon, "velocity")


def find_acceleration_critical_time(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    horizon: float = SearchHorizons.TIME_HORIZON,
) -> float:
    """Find the time at which acceleration decays to ``percent`` of MAC."""
    _check_fraction(percent)
    target = percent * MSS / TAU

    def excess(t: float) -> float:
        acceleration = predict_acceleration_at_time(
            t, MSS, TAU, time_correction, distance_correction
        )
        return acceleration - target

    lower = _lower_bound(time_correction, horizon)
    return _bounded_root(excess, lower, horizon, "acceleration")


def find_acceleration_critical_distance(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    horizon: float = SearchHorizons.DISTANCE_HORIZON,
) -> float:
    """Find the distance at which acceleration decays to ``percent`` of MAC."""
    _check_fraction(percent)
    target = percent * MSS / TAU

    def excess(d: float) -> float:
        acceleration = predict_acceleration_at_distance(
            d, MSS, TAU, time_correction, distance_correction
        )
        return acceleration - target

    lower = _lower_bound(distance_correction, horizon)
    return _bounded_root(excess, lower, horizon, "acceleration")


def find_power_critical_time(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    horizon: float = SearchHorizons.TIME_HORIZON,
) -> dict[str, float]:
    """
    Find the time window in which power stays above ``percent`` of its peak.

    Args:
        percent: Fraction of peak power in (0, 1]; 1 returns the peak time as
            both bounds

    Returns:
        Dictionary with 'lower' and 'upper' keys bracketing the peak

    Raises:
        DomainError: If ``percent`` is outside (0, 1] or either crossing lies
            outside the horizon
    """
    _check_fraction(percent, allow_one=True)

    def power(t: float) -> float:
        return predict_power_at_time(
            t,
            MSS,
            TAU,
            time_correction,
            distance_correction,
            bodymass=bodymass,
            bodyheight=bodyheight,
            environment=environment,
        )

    lower = _lower_bound(time_correction, horizon)
    return _power_window(power, percent, lower, horizon)


def find_power_critical_distance(
    MSS: float,
    TAU: float,
    percent: float = 0.9,
    time_correction: float = 0.0,
    distance_correction: float = 0.0,
    bodymass: float | None = None,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    horizon: float = SearchHorizons.DISTANCE_HORIZON,
) -> dict[str, float]:
    """Find the distance window in which power stays above ``percent`` of peak."""
    _check_fraction(percent, allow_one=True)

    def power(d: float) -> float:
        return predict_power_at_distance(
            d,
            MSS,
            TAU,
            time_correction,
            distance_correction,
            bodymass=bodymass,
            bodyheight=bodyheight,
            environment=environment,
        )

    lower = _lower_bound(distance_correction, horizon)
    return _power_window(power, percent, lower, horizon)


def _power_window(
    power: Callable[[float], float], percent: float, lower: float, upper: float
) -> dict[str, float]:
    """Bracket the region around the power peak where power >= percent * peak."""
    peak, max_power = _maximize(power, lower, upper)
    if percent == 1:
        return {"lower": peak, "upper": peak}

    target = percent * max_power

    def excess(x: float) -> float:
        return power(x) - target

    return {
        "lower": _bounded_root(excess, lower, peak, "rising power"),
        "upper": _bounded_root(excess, peak, upper, "falling power"),
    }


def _maximize(
    func: Callable[[float], float], lower: float, upper: float
) -> tuple[float, float]:
    """Maximize a unimodal function on [lower, upper]; return (argmax, max)."""
    result = minimize_scalar(
        lambda x: -func(x),
        bounds=(lower, upper),
        method="bounded",
        options={"xatol": SearchHorizons.XTOL},
    )
    if not result.success:
        raise ConvergenceError(
            f"Maximum search failed: {result.message}",
            last_iterate=np.atleast_1d(result.x),
            reason=str(result.message),
        )
    logger.debug(f"Maximum at {result.x:.6f} after {result.nfev} evaluations")
    return float(result.x), float(-result.fun)


def _bounded_root(
    func: Callable[[float], float], lower: float, upper: float, what: str
) -> float:
    """Find the single sign change of ``func`` in [lower, upper]."""
    f_lower = func(lower)
    f_upper = func(upper)
    if f_lower == 0:
        return float(lower)
    if f_upper == 0:
        return float(upper)
    if np.sign(f_lower) == np.sign(f_upper):
        raise DomainError(
            f"No {what} threshold crossing within [{lower:g}, {upper:g}]"
        )
    return float(brentq(func, lower, upper, xtol=SearchHorizons.XTOL))


def _lower_bound(correction: float, horizon: float) -> float:
    """Start of the searched range: where the corrected axis reaches zero."""
    lower = max(0.0, -correction)
    if horizon <= lower:
        raise DomainError(f"Search horizon {horizon!r} must exceed {lower!r}")
    return lower


def _check_fraction(percent: float, allow_one: bool = False) -> None:
    upper_ok = percent <= 1 if allow_one else percent < 1
    if not (percent > 0 and upper_ok):
        bound = "1]" if allow_one else "1)"
        raise DomainError(f"percent must be in (0, {bound}, got {percent!r}")
