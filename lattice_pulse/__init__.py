"""Particle-in-cell lattice simulator with a threaded grid iteration engine."""

from lattice_pulse.errors import LatticePulseError, ConfigurationError, CellIteratorError

__version__ = "0.1"
