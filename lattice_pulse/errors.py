"""Custom exceptions for the :mod:`lattice_pulse` package."""
from __future__ import annotations

from typing import Sequence


class LatticePulseError(Exception):
    """Base exception for lattice simulation errors."""


class ConfigurationError(LatticePulseError, ValueError):
    """Invalid parameters detected before the simulation starts stepping."""


class CellIteratorError(LatticePulseError, RuntimeError):
    """One or more cell actions failed during a grid pass.

    The pass is invalid as a whole; ``errors`` holds every exception collected
    from the worker tasks.
    """

    def __init__(self, message: str, errors: Sequence[BaseException] = ()):
        super().__init__(message)
        self.errors = list(errors)


__all__ = [
    "LatticePulseError",
    "ConfigurationError",
    "CellIteratorError",
]
