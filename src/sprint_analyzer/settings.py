"""Application settings and configuration management."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    AnthropometricDefaults,
    ProfileDefaults,
    SearchHorizons,
    SolverDefaults,
)
from .constants import StartValues as StartValueDefaults
from .models import Environment


class SolverConfig(BaseModel):
    """Convergence controls for the individual and mixed-effects solvers."""

    max_iterations: int = Field(
        SolverDefaults.MAX_ITERATIONS,
        description="Maximum function evaluations of the NLS solver",
    )
    tolerance: float = Field(
        SolverDefaults.TOLERANCE, description="ftol/xtol/gtol of the NLS solver"
    )
    mixed_max_iterations: int = Field(
        SolverDefaults.MIXED_MAX_ITERATIONS,
        description="Maximum outer iterations of the mixed-effects solver",
    )
    mixed_tolerance: float = Field(
        SolverDefaults.MIXED_TOLERANCE,
        description="Relative change stopping rule of the mixed-effects solver",
    )

    @field_validator("*")
    @classmethod
    def check_positive(cls, v: float | int, info) -> float | int:
        """Validate that all solver controls are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v


# pylint: disable=C0103
class StartValues(BaseModel):
    """Starting values for the nonlinear solvers."""

    MSS: float = Field(StartValueDefaults.MSS, description="Start for MSS")
    TAU: float = Field(StartValueDefaults.TAU, description="Start for TAU")
    time_correction: float = Field(
        StartValueDefaults.TIME_CORRECTION, description="Start for time correction"
    )
    distance_correction: float = Field(
        StartValueDefaults.DISTANCE_CORRECTION,
        description="Start for distance correction",
    )

    @field_validator("MSS", "TAU")
    @classmethod
    def check_positive(cls, v: float) -> float:
        """MSS and TAU must start inside the valid parameter space."""
        if v <= 0:
            raise ValueError("MSS and TAU start values must be positive")
        return v


class Settings(BaseSettings):
    """
    Application settings for Sprint Analyzer.

    Settings are loaded in the following order of precedence (highest to lowest):
    1. Environment variables (e.g., SPRINT_ANALYZER_BODYMASS)
    2. .env file (if found)
    3. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="SPRINT_ANALYZER_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # --- Solvers ---
    solver: SolverConfig = SolverConfig()
    start_values: StartValues = StartValues()

    # --- Athlete and environment ---
    bodymass: float = AnthropometricDefaults.BODYMASS
    bodyheight: float = AnthropometricDefaults.BODYHEIGHT
    environment: Environment = Environment()

    # --- Force-velocity profile ---
    fv_max_time: float = ProfileDefaults.MAX_TIME
    fv_frequency: float = ProfileDefaults.FREQUENCY
    rfmax_cutoff: float = ProfileDefaults.RFMAX_CUTOFF

    # --- Critical point search ranges ---
    time_horizon: float = SearchHorizons.TIME_HORIZON
    distance_horizon: float = SearchHorizons.DISTANCE_HORIZON

    @field_validator(
        "bodymass",
        "bodyheight",
        "fv_max_time",
        "fv_frequency",
        "time_horizon",
        "distance_horizon",
    )
    @classmethod
    def check_positive(cls, v: float, info) -> float:
        """Validate physical quantities and horizons are positive."""
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive")
        return v

    @field_validator("rfmax_cutoff")
    @classmethod
    def check_cutoff(cls, v: float) -> float:
        """Validate the RF cutoff is non-negative."""
        if v < 0:
            raise ValueError("rfmax_cutoff must be non-negative")
        return v


def load_settings(config_file: Path | None = None) -> Settings:
    """Load settings from a YAML file, environment variables, and defaults."""
    if config_file:
        with open(config_file, encoding="utf-8") as f:
            yaml_settings = yaml.safe_load(f) or {}

        # Create a Settings object from YAML, then merge with env vars/defaults
        return Settings(**yaml_settings)

    return Settings()
