"""
Custom exceptions for the Sprint Analyzer package.

This module defines all custom exceptions used throughout the application,
providing clear error hierarchies and specific error types for different scenarios.
"""

import numpy as np


class SprintAnalyzerError(Exception):
    """Base exception for all Sprint Analyzer errors."""


class ConfigurationError(SprintAnalyzerError):
    """Raised when there is an issue with configuration settings."""


class InputError(SprintAnalyzerError, ValueError):
    """Raised when observations are malformed, non-finite or too few to fit."""


class DomainError(SprintAnalyzerError, ValueError):
    """Raised when an argument falls outside the domain of a model function."""


class FitError(SprintAnalyzerError):
    """Raised when a model cannot be fitted to the supplied observations."""


class ConvergenceError(FitError):
    """Raised when the solver fails to converge or yields invalid parameters."""

    def __init__(
        self,
        message: str,
        last_iterate: np.ndarray | None = None,
        reason: str | None = None,
    ):
        super().__init__(message)
        self.last_iterate = last_iterate
        self.reason = reason


class DegenerateFitError(FitError):
    """Raised when a random-effects covariance estimate is singular."""


class LOOCVError(FitError):
    """Raised when a single leave-one-out refit fails."""

    def __init__(self, message: str, index: int):
        super().__init__(message)
        self.index = index
