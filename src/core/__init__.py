"""Core infrastructure: settings, logging, constants and exceptions."""

from .exceptions import (
    DataLoadError,
    InvalidParameterError,
    ParameterValidationError,
    RentalModelError,
    SimulationError,
)
from .logging import configure_logging, get_logger
from .settings import AppSettings, get_settings

__all__ = [
    "AppSettings",
    "configure_logging",
    "get_logger",
    "get_settings",
    # Exceptions
    "RentalModelError",
    "DataLoadError",
    "SimulationError",
    "ParameterValidationError",
    "InvalidParameterError",
]
