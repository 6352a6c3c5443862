"""
Shared pytest fixtures for Sprint Analyzer tests.

This module provides reusable fixtures for:
- Settings configurations
- Synthetic split times and radar traces with known parameters
- Multi-athlete long-format DataFrames
"""

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

from sprint_analyzer.kinematics.model import (
    predict_time_at_distance,
    predict_velocity_at_time,
)
from sprint_analyzer.settings import Settings

# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def temp_config_file(tmp_path: Path) -> Path:
    """Create a temporary YAML config file path for testing."""
    return tmp_path / "config.yaml"


@pytest.fixture
def sample_config_dict() -> dict:
    """Provide a sample configuration dictionary."""
    return {
        "bodymass": 80.0,
        "bodyheight": 1.85,
        "environment": {
            "barometric_pressure": 740,
            "air_temperature": 18,
            "wind_velocity": 0.5,
        },
        "solver": {"max_iterations": 2000, "tolerance": 1e-9},
        "start_values": {"MSS": 8.0, "TAU": 1.0},
        "rfmax_cutoff": 0.5,
    }


@pytest.fixture
def sample_config_file(temp_config_file: Path, sample_config_dict: dict) -> Path:
    """Create a temporary config file with sample data."""
    with open(temp_config_file, "w", encoding="utf-8") as f:
        yaml.dump(sample_config_dict, f)
    return temp_config_file


@pytest.fixture
def default_settings() -> Settings:
    """Provide settings with all defaults."""
    return Settings()


# ============================================================================
# Data Fixtures - Individual Athlete
# ============================================================================


@pytest.fixture
def true_parameters() -> dict[str, float]:
    """MSS and TAU used to generate the synthetic individual data."""
    return {"MSS": 8.0, "TAU": 0.9}


@pytest.fixture
def split_distances() -> np.ndarray:
    """Timing gate positions in m."""
    return np.array([5.0, 10.0, 20.0, 30.0, 40.0])


@pytest.fixture
def clean_splits(true_parameters: dict, split_distances: np.ndarray) -> pd.DataFrame:
    """Noise-free split times generated from known parameters."""
    time = predict_time_at_distance(
        split_distances, true_parameters["MSS"], true_parameters["TAU"]
    )
    return pd.DataFrame({"distance": split_distances, "time": time})


@pytest.fixture
def noisy_splits(clean_splits: pd.DataFrame) -> pd.DataFrame:
    """Split times with tiny seeded measurement noise."""
    rng = np.random.default_rng(42)
    df = clean_splits.copy()
    df["time"] = df["time"] + rng.normal(0, 1e-5, len(df))
    return df


@pytest.fixture
def biased_splits(true_parameters: dict) -> pd.DataFrame:
    """Split times with a known time and distance bias at more gates."""
    distances = np.array([5.0, 10.0, 15.0, 20.0, 25.0, 30.0, 35.0, 40.0])
    time = predict_time_at_distance(
        distances,
        true_parameters["MSS"],
        true_parameters["TAU"],
        time_correction=0.3,
        distance_correction=0.5,
    )
    return pd.DataFrame({"distance": distances, "time": time})


@pytest.fixture
def radar_trace(true_parameters: dict) -> pd.DataFrame:
    """Radar velocity trace sampled at 10 Hz with seeded noise."""
    rng = np.random.default_rng(7)
    time = np.linspace(0.0, 6.0, 61)
    velocity = predict_velocity_at_time(
        time, true_parameters["MSS"], true_parameters["TAU"]
    )
    return pd.DataFrame(
        {"time": time, "velocity": velocity + rng.normal(0, 0.01, len(time))}
    )


# ============================================================================
# Data Fixtures - Multiple Athletes
# ============================================================================


@pytest.fixture
def athlete_parameters() -> pd.DataFrame:
    """True per-athlete parameters of the synthetic team."""
    return pd.DataFrame(
        {
            "athlete": ["A", "B", "C", "D", "E", "F"],
            "MSS": [7.0, 7.6, 8.1, 8.5, 9.0, 9.4],
            "TAU": [0.75, 0.95, 0.8, 1.05, 0.9, 1.0],
        }
    )


@pytest.fixture
def team_splits(athlete_parameters: pd.DataFrame) -> pd.DataFrame:
    """Long-format split times for six athletes with seeded noise."""
    rng = np.random.default_rng(2024)
    distances = np.array([5.0, 10.0, 15.0, 20.0, 30.0, 40.0])
    rows = []
    for athlete in athlete_parameters.itertuples():
        time = predict_time_at_distance(distances, athlete.MSS, athlete.TAU)
        time = time + rng.normal(0, 0.01, len(distances))
        rows.append(
            pd.DataFrame({"athlete": athlete.athlete, "distance": distances, "time": time})
        )
    return pd.concat(rows, ignore_index=True)


@pytest.fixture
def team_radar(athlete_parameters: pd.DataFrame) -> pd.DataFrame:
    """Long-format radar traces for six athletes with seeded noise."""
    rng = np.random.default_rng(99)
    time = np.linspace(0.0, 5.0, 21)
    rows = []
    for athlete in athlete_parameters.itertuples():
        velocity = predict_velocity_at_time(time, athlete.MSS, athlete.TAU)
        velocity = velocity + rng.normal(0, 0.05, len(time))
        rows.append(
            pd.DataFrame({"athlete": athlete.athlete, "time": time, "velocity": velocity})
        )
    return pd.concat(rows, ignore_index=True)
