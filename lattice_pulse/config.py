"""Configuration schema for lattice simulations.

The models mirror the YAML files accepted by :mod:`lattice_pulse.run`. They
only hold plain values; :meth:`lattice_pulse.simulation.Simulation.from_config`
turns them into operators.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from lattice_pulse.errors import ConfigurationError

logger = logging.getLogger(__name__)


class LatticeConfig(BaseModel):
    """Shape and constants of the lattice."""

    shape: List[int] = Field(..., min_length=1, max_length=3, description="Cells per axis")
    spacing: float = Field(1.0, gt=0, description="Lattice spacing a")
    coupling: float = Field(1.0, gt=0, description="Gauge coupling g")
    dt: float = Field(..., gt=0, description="Timestep")
    nr_ghost_cells: int = Field(0, ge=0, description="Halo cells on each side of every axis")

    @field_validator("shape")
    @classmethod
    def _check_shape(cls, value: List[int]) -> List[int]:
        if any(n < 1 for n in value):
            raise ValueError("every lattice axis needs at least one cell")
        return value


class MVModelConfig(BaseModel):
    """Color charge sheet of the McLerran-Venugopalan model."""

    direction: int = Field(..., ge=0, description="Axis the sheet moves along")
    orientation: int = Field(..., description="-1 or 1")
    location: float = Field(..., description="Initial longitudinal location")
    longitudinal_width: float = Field(..., gt=0, description="Gaussian longitudinal width")
    mu: float = Field(..., ge=0, description="MV model parameter")
    seed: Optional[int] = Field(None, description="Seed of the random charges")

    @field_validator("orientation")
    @classmethod
    def _check_orientation(cls, value: int) -> int:
        if value not in (-1, 1):
            raise ValueError("orientation must be -1 or 1")
        return value


class ProjectedEnergyDensityConfig(BaseModel):
    path: str
    time_interval: float = Field(..., gt=0)
    direction: int = Field(..., ge=0)


class FieldSnapshotConfig(BaseModel):
    prefix: str
    time_interval: float = Field(..., gt=0)


class DiagnosticsConfig(BaseModel):
    projected_energy_density: List[ProjectedEnergyDensityConfig] = Field(default_factory=list)
    field_snapshots: List[FieldSnapshotConfig] = Field(default_factory=list)


class SimulationConfig(BaseModel):
    """Top level configuration."""

    lattice: LatticeConfig
    nr_threads: int = Field(1, ge=1, description="Size of the worker thread pool")
    nr_steps: int = Field(0, ge=0, description="Number of steps run by the command line")
    output_directory: str = "output"
    current_generators: List[MVModelConfig] = Field(default_factory=list)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)


def parse_config(data: dict) -> SimulationConfig:
    """Validate a mapping into a :class:`SimulationConfig`."""

    if not isinstance(data, dict):
        raise ConfigurationError("configuration root must be a mapping")
    try:
        return SimulationConfig(**data)
    except ValidationError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_config(path: Path) -> SimulationConfig:
    """Load a YAML configuration file into a :class:`SimulationConfig` instance."""

    from ruamel.yaml import YAML

    yaml = YAML(typ="safe")
    source_path = Path(path).resolve()
    with source_path.open("r", encoding="utf-8") as fh:
        data = yaml.load(fh)
    logger.debug("Loaded configuration from %s", source_path)
    return parse_config(data)


__all__ = [
    "LatticeConfig",
    "MVModelConfig",
    "ProjectedEnergyDensityConfig",
    "FieldSnapshotConfig",
    "DiagnosticsConfig",
    "SimulationConfig",
    "parse_config",
    "load_config",
]
