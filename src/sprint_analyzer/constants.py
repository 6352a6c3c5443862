"""
Constants used throughout the Sprint Analyzer package.

This module centralizes all magic numbers and commonly used values to improve
maintainability and clarity.
"""

from typing import Final


# === Model Parameters ===
class ParameterNames:
    """Names of the mono-exponential model parameters."""

    MSS: Final[str] = "MSS"
    TAU: Final[str] = "TAU"
    TIME_CORRECTION: Final[str] = "time_correction"
    DISTANCE_CORRECTION: Final[str] = "distance_correction"

    CORRECTIONS: Final[tuple[str, ...]] = ("time_correction", "distance_correction")
    DEFAULT_RANDOM_EFFECTS: Final[tuple[str, ...]] = ("MSS", "TAU")


# === Solver Start Values ===
class StartValues:
    """Default starting values for the nonlinear solvers."""

    MSS: Final[float] = 7.0  # m/s
    TAU: Final[float] = 0.8  # s
    TIME_CORRECTION: Final[float] = 0.0  # s
    DISTANCE_CORRECTION: Final[float] = 0.0  # m


# === Solver Controls ===
class SolverDefaults:
    """Convergence controls for the nonlinear solvers."""

    MAX_ITERATIONS: Final[int] = 1000  # Max function evaluations
    TOLERANCE: Final[float] = 1e-10
    MIXED_MAX_ITERATIONS: Final[int] = 500  # Outer PNLS / variance iterations
    MIXED_TOLERANCE: Final[float] = 1e-6

    # Relative eigenvalue floor below which a covariance is treated as singular
    SINGULARITY_THRESHOLD: Final[float] = 1e-10
    # Random-effect SD relative to its fixed effect below which the effect has collapsed
    COLLAPSE_THRESHOLD: Final[float] = 1e-4
    JACOBIAN_STEP: Final[float] = 1e-6


# === Anthropometrics ===
class AnthropometricDefaults:
    """Default athlete anthropometrics."""

    BODYMASS: Final[float] = 75.0  # kg
    BODYHEIGHT: Final[float] = 1.72  # m


# === Environment ===
class EnvironmentDefaults:
    """Default environmental conditions for air resistance."""

    BAROMETRIC_PRESSURE: Final[float] = 760.0  # mmHg
    AIR_TEMPERATURE: Final[float] = 25.0  # deg C
    WIND_VELOCITY: Final[float] = 0.0  # m/s


# === Physical Constants ===
class PhysicalConstants:
    """Physical constants for kinetics and air resistance."""

    GRAVITY: Final[float] = 9.81  # m/s^2
    AIR_DENSITY_STP: Final[float] = 1.293  # kg/m^3 at 0 deg C and 760 mmHg
    STANDARD_PRESSURE: Final[float] = 760.0  # mmHg
    ZERO_CELSIUS_KELVIN: Final[float] = 273.0
    DRAG_COEFFICIENT: Final[float] = 0.9

    # Frontal area regression: A = 0.2025 * h^0.725 * m^0.425 * 0.266
    BSA_COEFFICIENT: Final[float] = 0.2025
    BSA_HEIGHT_EXPONENT: Final[float] = 0.725
    BSA_MASS_EXPONENT: Final[float] = 0.425
    FRONTAL_AREA_FRACTION: Final[float] = 0.266


# === Force-Velocity Profile ===
class ProfileDefaults:
    """Defaults for simulated force-velocity profiles."""

    MAX_TIME: Final[float] = 6.0  # s
    FREQUENCY: Final[float] = 100.0  # Hz
    RFMAX_CUTOFF: Final[float] = 0.3  # s


# === Critical Point Search ===
class SearchHorizons:
    """Bounded search ranges for critical point finders."""

    TIME_HORIZON: Final[float] = 30.0  # s
    DISTANCE_HORIZON: Final[float] = 100.0  # m
    XTOL: Final[float] = 1e-10


# === Column Names ===
class Columns:
    """Column names of working frames and result tables."""

    ATHLETE: Final[str] = "athlete"
    DISTANCE: Final[str] = "distance"
    TIME: Final[str] = "time"
    VELOCITY: Final[str] = "velocity"
    TIME_CORRECTION: Final[str] = "time_correction"
    WEIGHTS: Final[str] = "weights"
    PRED_TIME: Final[str] = "pred_time"
    PRED_VELOCITY: Final[str] = "pred_velocity"
