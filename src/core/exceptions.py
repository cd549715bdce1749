"""Custom exceptions for the rental leverage model.

Everything raised on purpose derives from ``RentalModelError``.
"""

from __future__ import annotations

from typing import Any


class RentalModelError(Exception):
    """Base exception for all rental leverage model errors."""
    pass


# --- Input Errors ---

class ParameterValidationError(RentalModelError):
    """Investment parameters failed validation; the run was refused."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("Invalid investment parameters:\n" + "\n".join(self.errors))


class InvalidParameterError(RentalModelError):
    """Invalid parameter value provided."""

    def __init__(self, param_name: str, value: Any, reason: str = ""):
        self.param_name = param_name
        self.value = value
        self.reason = reason
        msg = f"Invalid parameter '{param_name}': {value}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg)


# --- Calculation Errors ---

class SimulationError(RentalModelError):
    """Error during financial simulation or result aggregation."""
    pass


# --- Data Errors ---

class DataLoadError(RentalModelError):
    """Failed to load or parse saved results."""
    pass
