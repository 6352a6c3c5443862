"""
Command-line interface for the Sprint Analyzer package.

This module provides a thin command-line layer over the public API: fitting
split-time, radar and mixed-effects models from CSV files, and printing
force-velocity profiles for given sprint parameters.
"""

import json
import logging
from pathlib import Path
from typing import Any

import click
import numpy as np
import pandas as pd
import yaml
from pydantic import ValidationError

from .analysis import (
    find_max_power_distance,
    find_max_power_time,
    find_velocity_critical_distance,
    find_velocity_critical_time,
    make_fv_profile,
)
from .constants import Columns
from .estimation import (
    MixedEffectsEstimator,
    fit_radar,
    fit_radar_with_time_correction,
    fit_splits,
    fit_splits_with_corrections,
    fit_splits_with_time_correction,
)
from .exceptions import ConfigurationError, SprintAnalyzerError
from .models import Correction, FitResult, MixedFitResult
from .settings import Settings, load_settings

SPLIT_FITS = {
    Correction.NONE: fit_splits,
    Correction.TIME: fit_splits_with_time_correction,
    Correction.TIME_AND_DISTANCE: fit_splits_with_corrections,
}

RADAR_FITS = {
    Correction.NONE: fit_radar,
    Correction.TIME: fit_radar_with_time_correction,
}


# Configure basic logging
def configure_logging(verbose: bool = False) -> None:
    """Configure logging with appropriate level."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def config_option(func):
    """Add the --config and --verbose/--quiet options."""
    func = click.option(
        "--verbose/--quiet",
        default=False,
        help="Enable verbose output",
    )(func)
    return click.option(
        "--config",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Path to configuration file",
    )(func)


def _settings(config: Path | None) -> Settings:
    try:
        return load_settings(config)
    except (ValidationError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _read_csv(path: Path, columns: list[str]) -> pd.DataFrame:
    df = pd.read_csv(path)
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise ConfigurationError(
            f"Columns {missing} not found in {path}; available: {list(df.columns)}"
        )
    return df


def _fit_summary(result: FitResult) -> dict[str, Any]:
    summary = {
        "kind": result.kind,
        "correction": result.correction.value,
        "parameters": result.parameters.model_dump(),
        "model_fit": result.model_fit.model_dump(),
    }
    if result.loocv is not None:
        summary["loocv_model_fit"] = result.loocv.model_fit.model_dump()
    return summary


def _mixed_summary(result: MixedFitResult) -> dict[str, Any]:
    return {
        "kind": result.kind,
        "correction": result.correction.value,
        "random_effects": result.random_effects,
        "fixed": result.fixed.model_dump(),
        "random": {k: v.model_dump() for k, v in result.random.items()},
        "model_fit": result.model_fit.model_dump(),
    }


def _json_safe(value: Any) -> Any:
    """Replace non-finite floats with None, which JSON renders as null."""
    if isinstance(value, dict):
        return {k: _json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_json_safe(v) for v in value]
    if isinstance(value, (float, np.floating)):
        return float(value) if np.isfinite(value) else None
    return value


def _echo_json(payload: dict[str, Any]) -> None:
    click.echo(json.dumps(_json_safe(payload), indent=2, default=str, allow_nan=False))


@click.group()
def main():
    """
    Estimate short sprint performance parameters.

    This tool fits the mono-exponential sprint model to timing-gate splits or
    radar traces and derives force-velocity profiles from the fitted
    parameters.
    """


@main.command("fit-splits")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.option("--distance-col", default=Columns.DISTANCE, show_default=True)
@click.option("--time-col", default=Columns.TIME, show_default=True)
@click.option(
    "--estimate",
    type=click.Choice([c.value for c in Correction]),
    default=Correction.NONE.value,
    show_default=True,
    help="Corrections estimated as free parameters",
)
@click.option(
    "--time-correction",
    type=float,
    default=0.0,
    help="Fixed time correction in s (only with --estimate none)",
)
@click.option("--loocv/--no-loocv", default=False, help="Run leave-one-out CV")
@click.option("--na-rm/--no-na-rm", default=False, help="Drop rows with missing values")
def fit_splits_command(
    csv_file: Path,
    config: Path | None,
    verbose: bool,
    distance_col: str,
    time_col: str,
    estimate: str,
    time_correction: float,
    loocv: bool,
    na_rm: bool,
) -> None:
    """Fit a split-time model to one athlete's splits."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = _settings(config)
        df = _read_csv(csv_file, [distance_col, time_col])
        correction = Correction(estimate)
        kwargs: dict[str, Any] = {}
        if correction is Correction.NONE:
            kwargs["time_correction"] = time_correction
        result = SPLIT_FITS[correction](
            df[distance_col],
            df[time_col],
            LOOCV=loocv,
            na_rm=na_rm,
            settings=settings,
            **kwargs,
        )
        _echo_json(_fit_summary(result))
    except SprintAnalyzerError as e:
        logger.error(f"Split-time fit failed: {str(e)}")
        raise click.Abort() from e


@main.command("fit-radar")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.option("--time-col", default=Columns.TIME, show_default=True)
@click.option("--velocity-col", default=Columns.VELOCITY, show_default=True)
@click.option(
    "--estimate",
    type=click.Choice([c.value for c in RADAR_FITS]),
    default=Correction.NONE.value,
    show_default=True,
    help="Corrections estimated as free parameters",
)
@click.option(
    "--time-correction",
    type=float,
    default=0.0,
    help="Fixed time correction in s (only with --estimate none)",
)
@click.option("--loocv/--no-loocv", default=False, help="Run leave-one-out CV")
@click.option("--na-rm/--no-na-rm", default=False, help="Drop rows with missing values")
def fit_radar_command(
    csv_file: Path,
    config: Path | None,
    verbose: bool,
    time_col: str,
    velocity_col: str,
    estimate: str,
    time_correction: float,
    loocv: bool,
    na_rm: bool,
) -> None:
    """Fit a radar model to one athlete's velocity trace."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = _settings(config)
        df = _read_csv(csv_file, [time_col, velocity_col])
        correction = Correction(estimate)
        kwargs: dict[str, Any] = {}
        if correction is Correction.NONE:
            kwargs["time_correction"] = time_correction
        result = RADAR_FITS[correction](
            df[time_col],
            df[velocity_col],
            LOOCV=loocv,
            na_rm=na_rm,
            settings=settings,
            **kwargs,
        )
        _echo_json(_fit_summary(result))
    except SprintAnalyzerError as e:
        logger.error(f"Radar fit failed: {str(e)}")
        raise click.Abort() from e


def _mixed_options(func):
    """Options shared by the mixed-effects commands."""
    for option in reversed(
        [
            click.option("--athlete-col", default=Columns.ATHLETE, show_default=True),
            click.option(
                "--time-correction",
                type=float,
                default=0.0,
                help="Fixed time correction in s (only with --estimate none)",
            ),
            click.option(
                "--random-effect",
                "random_effects",
                multiple=True,
                help="Parameter with athlete-level random effect (repeatable)",
            ),
            click.option(
                "--corrections-random/--corrections-fixed",
                default=False,
                help="Model estimated corrections as random effects",
            ),
            click.option(
                "--na-rm/--no-na-rm",
                default=False,
                help="Drop rows with missing values",
            ),
        ]
    ):
        func = option(func)
    return func


def _run_mixed(
    kind: str,
    csv_file: Path,
    config: Path | None,
    x_col: str,
    y_col: str,
    athlete_col: str,
    estimate: str,
    time_correction: float,
    random_effects: tuple[str, ...],
    corrections_random: bool,
    na_rm: bool,
) -> MixedFitResult:
    settings = _settings(config)
    df = _read_csv(csv_file, [x_col, y_col, athlete_col])
    return MixedEffectsEstimator(kind, settings).fit(
        df,
        x_col,
        y_col,
        athlete_col,
        correction=Correction(estimate),
        time_correction=time_correction,
        random_effects=list(random_effects) or None,
        corrections_as_random_effects=corrections_random,
        na_rm=na_rm,
    )


@main.command("fit-mixed-splits")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.option("--distance-col", default=Columns.DISTANCE, show_default=True)
@click.option("--time-col", default=Columns.TIME, show_default=True)
@click.option(
    "--estimate",
    type=click.Choice([c.value for c in Correction]),
    default=Correction.NONE.value,
    show_default=True,
    help="Corrections estimated as free parameters",
)
@_mixed_options
def fit_mixed_splits_command(
    csv_file: Path,
    config: Path | None,
    verbose: bool,
    distance_col: str,
    time_col: str,
    estimate: str,
    athlete_col: str,
    time_correction: float,
    random_effects: tuple[str, ...],
    corrections_random: bool,
    na_rm: bool,
) -> None:
    """Fit a mixed-effects split-time model to several athletes."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        result = _run_mixed(
            "splits",
            csv_file,
            config,
            distance_col,
            time_col,
            athlete_col,
            estimate,
            time_correction,
            random_effects,
            corrections_random,
            na_rm,
        )
        _echo_json(_mixed_summary(result))
    except SprintAnalyzerError as e:
        logger.error(f"Mixed split-time fit failed: {str(e)}")
        raise click.Abort() from e


@main.command("fit-mixed-radar")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@click.option("--time-col", default=Columns.TIME, show_default=True)
@click.option("--velocity-col", default=Columns.VELOCITY, show_default=True)
@click.option(
    "--estimate",
    type=click.Choice([c.value for c in RADAR_FITS]),
    default=Correction.NONE.value,
    show_default=True,
    help="Corrections estimated as free parameters",
)
@_mixed_options
def fit_mixed_radar_command(
    csv_file: Path,
    config: Path | None,
    verbose: bool,
    time_col: str,
    velocity_col: str,
    estimate: str,
    athlete_col: str,
    time_correction: float,
    random_effects: tuple[str, ...],
    corrections_random: bool,
    na_rm: bool,
) -> None:
    """Fit a mixed-effects radar model to several athletes."""
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        result = _run_mixed(
            "radar",
            csv_file,
            config,
            time_col,
            velocity_col,
            athlete_col,
            estimate,
            time_correction,
            random_effects,
            corrections_random,
            na_rm,
        )
        _echo_json(_mixed_summary(result))
    except SprintAnalyzerError as e:
        logger.error(f"Mixed radar fit failed: {str(e)}")
        raise click.Abort() from e


@main.command()
@config_option
@click.option("--mss", type=float, required=True, help="Maximal sprinting speed (m/s)")
@click.option("--tau", type=float, required=True, help="Relative acceleration (s)")
@click.option("--bodymass", type=float, help="Body mass in kg (overrides config)")
@click.option("--bodyheight", type=float, help="Body height in m (overrides config)")
def profile(
    config: Path | None,
    verbose: bool,
    mss: float,
    tau: float,
    bodymass: float | None,
    bodyheight: float | None,
) -> None:
    """
    Print the force-velocity profile and critical points for MSS and TAU.

    Profile settings (trace length, frequency, RF cutoff, environment) come
    from the configuration.
    """
    configure_logging(verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = _settings(config)
        mass = bodymass if bodymass is not None else settings.bodymass
        height = bodyheight if bodyheight is not None else settings.bodyheight

        fv = make_fv_profile(
            mss,
            tau,
            bodymass=mass,
            bodyheight=height,
            environment=settings.environment,
            max_time=settings.fv_max_time,
            frequency=settings.fv_frequency,
            RFmax_cutoff=settings.rfmax_cutoff,
        )
        payload = {
            "profile": fv.model_dump(exclude={"data"}),
            "max_power_time": find_max_power_time(
                mss,
                tau,
                bodymass=mass,
                bodyheight=height,
                environment=settings.environment,
                horizon=settings.time_horizon,
            ),
            "max_power_distance": find_max_power_distance(
                mss,
                tau,
                bodymass=mass,
                bodyheight=height,
                environment=settings.environment,
                horizon=settings.distance_horizon,
            ),
            "velocity_90_time": find_velocity_critical_time(
                mss, tau, 0.9, horizon=settings.time_horizon
            ),
            "velocity_90_distance": find_velocity_critical_distance(
                mss, tau, 0.9, horizon=settings.distance_horizon
            ),
        }
        _echo_json(payload)
    except SprintAnalyzerError as e:
        logger.error(f"Profile failed: {str(e)}")
        raise click.Abort() from e


if __name__ == "__main__":
    main()
