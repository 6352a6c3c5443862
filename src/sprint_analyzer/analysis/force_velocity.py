"""
Force-velocity profiling from sprint parameters.

A kinematic trace is simulated from MSS and TAU, horizontal force and ratio of
force are computed at every sample, and two linear regressions summarize the
trace:
- force on velocity gives F0, V0 and Pmax
- ratio of force on velocity (after the start) gives RFmax and Drf
"""

import logging

import numpy as np
import pandas as pd
from scipy.stats import linregress

from ..constants import AnthropometricDefaults, PhysicalConstants, ProfileDefaults
from ..exceptions import DomainError
from ..kinematics.air_resistance import predict_air_resistance
from ..kinematics.model import (
    predict_acceleration_at_time,
    predict_distance_at_time,
    predict_velocity_at_time,
)
from ..models import Environment, FVProfile

logger = logging.getLogger(__name__)


# pylint: disable=C0103,R0913,R0914
def make_fv_profile(
    MSS: float,
    TAU: float,
    bodymass: float = AnthropometricDefaults.BODYMASS,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    max_time: float = ProfileDefaults.MAX_TIME,
    frequency: float = ProfileDefaults.FREQUENCY,
    RFmax_cutoff: float = ProfileDefaults.RFMAX_CUTOFF,
) -> FVProfile:
    """
    Create a linear force-velocity profile.

    Args:
        MSS: Maximal sprinting speed in m/s
        TAU: Relative acceleration time constant in s
        bodymass: Body mass in kg
        bodyheight: Body height in m
        environment: Environmental conditions for air resistance
        max_time: Length of the simulated trace in s
        frequency: Sampling frequency of the simulated trace in Hz
        RFmax_cutoff: Samples with time above this cutoff enter the RF fit

    Returns:
        FVProfile with both regressions and the simulated trace

    Raises:
        DomainError: If the trace settings are invalid or the RF window holds
            fewer than two samples
    """
    if bodymass <= 0:
        raise DomainError("bodymass must be positive")
    if max_time <= 0 or frequency <= 0:
        raise DomainError("max_time and frequency must be positive")
    if RFmax_cutoff >= max_time:
        raise DomainError(
            f"RFmax_cutoff ({RFmax_cutoff}) must be below max_time ({max_time})"
        )

    df = simulate_sprint(
        MSS,
        TAU,
        bodymass=bodymass,
        bodyheight=bodyheight,
        environment=environment,
        max_time=max_time,
        frequency=frequency,
    )

    # Force-velocity line
    fv_fit = linregress(df["velocity"], df["force"])
    F0 = float(fv_fit.intercept)
    V0 = -F0 / float(fv_fit.slope)
    Pmax = F0 * V0 / 4
    RSE_FV = _residual_standard_error(
        df["force"], fv_fit.intercept + fv_fit.slope * df["velocity"]
    )

    # Ratio of force after the start
    rf_df = df[df["time"] > RFmax_cutoff]
    if len(rf_df) < 2:
        raise DomainError(
            f"Fewer than two samples after RFmax_cutoff={RFmax_cutoff} s; "
            "increase max_time or frequency"
        )
    rf_fit = linregress(rf_df["velocity"], rf_df["RF"])
    RSE_Drf = _residual_standard_error(
        rf_df["RF"], rf_fit.intercept + rf_fit.slope * rf_df["velocity"]
    )

    logger.debug(f"FV profile: F0={F0:.2f} N, V0={V0:.2f} m/s, Pmax={Pmax:.1f} W")

    return FVProfile(
        bodymass=bodymass,
        F0=F0,
        F0_rel=F0 / bodymass,
        V0=V0,
        Pmax=Pmax,
        Pmax_rel=Pmax / bodymass,
        FV_slope=-(F0 / bodymass) / V0,
        RFmax=float(rf_fit.intercept),
        RFmax_cutoff=RFmax_cutoff,
        Drf=float(rf_fit.slope),
        RSE_FV=RSE_FV,
        RSE_Drf=RSE_Drf,
        data=df,
    )


def simulate_sprint(
    MSS: float,
    TAU: float,
    bodymass: float = AnthropometricDefaults.BODYMASS,
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT,
    environment: Environment | None = None,
    max_time: float = ProfileDefaults.MAX_TIME,
    frequency: float = ProfileDefaults.FREQUENCY,
) -> pd.DataFrame:
    """
    Simulate a sprint trace sampled at ``frequency`` from 0 to ``max_time``.

    Returns:
        DataFrame with time, distance, velocity, acceleration, air_resistance,
        force, power, relative_power and RF columns
    """
    n_samples = int(round(max_time * frequency)) + 1
    time = np.linspace(0.0, max_time, n_samples)

    velocity = predict_velocity_at_time(time, MSS, TAU)
    acceleration = predict_acceleration_at_time(time, MSS, TAU)
    air_resistance = predict_air_resistance(
        velocity, bodymass=bodymass, bodyheight=bodyheight, environment=environment
    )
    force = bodymass * acceleration + air_resistance
    power = force * velocity
    vertical_force = bodymass * PhysicalConstants.GRAVITY

    return pd.DataFrame(
        {
            "time": time,
            "distance": predict_distance_at_time(time, MSS, TAU),
            "velocity": velocity,
            "acceleration": acceleration,
            "air_resistance": air_resistance,
            "force": force,
            "power": power,
            "relative_power": power / bodymass,
            "RF": force / np.sqrt(force**2 + vertical_force**2),
        }
    )


def _residual_standard_error(observed: pd.Series, fitted: pd.Series) -> float:
    """Residual standard error of a two-parameter linear fit."""
    residuals = np.asarray(observed, dtype=float) - np.asarray(fitted, dtype=float)
    dof = len(residuals) - 2
    if dof <= 0:
        return float("nan")
    return float(np.sqrt(np.sum(residuals**2) / dof))
