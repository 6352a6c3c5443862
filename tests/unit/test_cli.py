"""Unit tests for the command-line interface."""

import json
from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from sprint_analyzer.cli import _echo_json, main


@pytest.fixture
def runner() -> CliRunner:
    """Provide a click test runner."""
    return CliRunner()


@pytest.fixture
def splits_csv(tmp_path: Path, noisy_splits: pd.DataFrame) -> Path:
    """Write the individual splits to CSV."""
    path = tmp_path / "splits.csv"
    noisy_splits.to_csv(path, index=False)
    return path


@pytest.fixture
def radar_csv(tmp_path: Path, radar_trace: pd.DataFrame) -> Path:
    """Write the radar trace to CSV with custom column names."""
    path = tmp_path / "radar.csv"
    radar_trace.rename(columns={"time": "t", "velocity": "v"}).to_csv(path, index=False)
    return path


@pytest.fixture
def team_csv(tmp_path: Path, team_splits: pd.DataFrame) -> Path:
    """Write team splits to CSV."""
    path = tmp_path / "team.csv"
    team_splits.to_csv(path, index=False)
    return path


class TestFitCommands:
    """Test the fitting commands."""

    def test_fit_splits(self, runner: CliRunner, splits_csv: Path):
        """Split fits print parameters and model fit."""
        result = runner.invoke(main, ["fit-splits", str(splits_csv)])

        assert result.exit_code == 0, result.output
        assert '"MSS": ' in result.output
        assert '"model_fit"' in result.output

    def test_fit_splits_with_correction_and_loocv(
        self, runner: CliRunner, splits_csv: Path
    ):
        """Correction variant and LOOCV are selectable."""
        result = runner.invoke(
            main, ["fit-splits", str(splits_csv), "--estimate", "time", "--loocv"]
        )

        assert result.exit_code == 0, result.output
        assert '"correction": "time"' in result.output
        assert '"loocv_model_fit"' in result.output

    def test_fit_radar_custom_columns(self, runner: CliRunner, radar_csv: Path):
        """Column names are configurable."""
        result = runner.invoke(
            main,
            ["fit-radar", str(radar_csv), "--time-col", "t", "--velocity-col", "v"],
        )

        assert result.exit_code == 0, result.output
        assert '"kind": "radar"' in result.output

    def test_missing_column_aborts(self, runner: CliRunner, radar_csv: Path):
        """Unknown columns abort with a non-zero exit code."""
        result = runner.invoke(main, ["fit-radar", str(radar_csv)])

        assert result.exit_code != 0

    def test_radar_rejects_distance_correction(self, runner: CliRunner, radar_csv: Path):
        """Radar fits only offer the time correction."""
        result = runner.invoke(
            main, ["fit-radar", str(radar_csv), "--estimate", "time_and_distance"]
        )

        assert result.exit_code == 2

    def test_fit_mixed_splits(self, runner: CliRunner, team_csv: Path):
        """Mixed fits print fixed and per-athlete parameters."""
        result = runner.invoke(main, ["fit-mixed-splits", str(team_csv)])

        assert result.exit_code == 0, result.output
        assert '"fixed"' in result.output
        assert '"F"' in result.output


class TestProfileCommand:
    """Test the profile command."""

    def test_profile(self, runner: CliRunner):
        """The profile reports FV parameters and critical points."""
        result = runner.invoke(main, ["profile", "--mss", "9", "--tau", "1.0"])

        assert result.exit_code == 0, result.output
        assert '"F0"' in result.output
        assert '"max_power_time"' in result.output

    def test_profile_with_config(self, runner: CliRunner, tmp_path: Path):
        """Configuration files supply anthropometrics."""
        config = tmp_path / "config.yaml"
        config.write_text(yaml.dump({"bodymass": 90}), encoding="utf-8")

        result = runner.invoke(
            main, ["profile", "--mss", "9", "--tau", "1.0", "--config", str(config)]
        )

        assert result.exit_code == 0, result.output
        assert '"bodymass": 90.0' in result.output

    def test_invalid_config_aborts(self, runner: CliRunner, tmp_path: Path):
        """Invalid configuration values abort."""
        config = tmp_path / "config.yaml"
        config.write_text(yaml.dump({"bodymass": -1}), encoding="utf-8")

        result = runner.invoke(
            main, ["profile", "--mss", "9", "--tau", "1.0", "--config", str(config)]
        )

        assert result.exit_code != 0


class TestJsonOutput:
    """Test JSON rendering of results."""

    def test_non_finite_values_become_null(self, capsys):
        """NaN and infinite metrics are printed as valid JSON nulls."""
        _echo_json(
            {
                "model_fit": {"r_squared": float("nan"), "rse": np.float64(0.01)},
                "errors": [np.inf, 1.0],
            }
        )

        output = capsys.readouterr().out
        assert "NaN" not in output
        payload = json.loads(output)
        assert payload["model_fit"]["r_squared"] is None
        assert payload["model_fit"]["rse"] == 0.01
        assert payload["errors"] == [None, 1.0]
