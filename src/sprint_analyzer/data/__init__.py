"""
Observation handling layer.

This package contains modules for validating observations and building the
working frames consumed by the estimators.
"""

from .observations import ObservationProcessor, ObservationProcessorProtocol, count_check

__all__ = [
    "ObservationProcessor",
    "ObservationProcessorProtocol",
    "count_check",
]
