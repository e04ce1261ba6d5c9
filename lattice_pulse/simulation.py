"""Simulation context tying lattice, particles and operators together."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional, Sequence

from lattice_pulse.config import SimulationConfig
from lattice_pulse.data.particles import Particles
from lattice_pulse.errors import ConfigurationError
from lattice_pulse.operator.allocator import LatticeAllocator
from lattice_pulse.operator.cell_access import CellIterator, ParallelCellIterator, SequentialCellIterator
from lattice_pulse.operator.current_generator import MVModel
from lattice_pulse.operator.deposition import ParticleDeposition
from lattice_pulse.operator.diagnostic import Diagnostic, FieldSnapshot, ProjectedEnergyDensity
from lattice_pulse.operator.electromagnetism import YeeFieldSolver

logger = logging.getLogger(__name__)


class Simulation:
    """
    Owns every component of a run and advances it step by step.

    One step runs, strictly one after another: the diagnostics for the
    current step, the optional particle pusher, deposition, the current
    generators and the field solver. All grid passes share one cell iterator
    and, with more than one thread, one worker pool.

    Parameters
    ----------
    lattice : Lattice
        Lattice holding all fields
    particles : Particles, optional
        Particles deposited every step
    nr_threads : int
        Size of the worker pool, 1 runs every pass sequentially
    current_generators : Sequence[MVModel]
        Current generators applied after deposition
    diagnostics : Sequence[Diagnostic]
        Diagnostics sampled at the start of every step
    field_solver : callable, optional
        Field solver, defaults to :class:`YeeFieldSolver`
    particle_pusher : callable, optional
        Called as ``particle_pusher(lattice, particles)`` before deposition
    """

    def __init__(
        self,
        lattice,
        particles: Optional[Particles] = None,
        nr_threads: int = 1,
        current_generators: Sequence[MVModel] = (),
        diagnostics: Sequence[Diagnostic] = (),
        field_solver: Optional[Callable] = None,
        particle_pusher: Optional[Callable] = None,
    ):
        if nr_threads < 1:
            raise ConfigurationError(f"nr_threads must be at least 1, got {nr_threads}")
        self.lattice = lattice
        self.particles = particles
        self.nr_threads = nr_threads
        self.current_generators = list(current_generators)
        self.diagnostics = list(diagnostics)
        self.field_solver = field_solver if field_solver is not None else YeeFieldSolver()
        self.particle_pusher = particle_pusher
        self.deposition = ParticleDeposition()
        self.step_count = 0

        # Worker pool and cell iterator
        self.executor = None
        if nr_threads > 1:
            self.executor = ThreadPoolExecutor(max_workers=nr_threads, thread_name_prefix="lattice-pulse")
            self.cell_iterator: CellIterator = ParallelCellIterator(nr_threads, executor=self.executor)
        else:
            self.cell_iterator = SequentialCellIterator()

    @classmethod
    def from_config(cls, config: SimulationConfig, particles: Optional[Particles] = None) -> "Simulation":
        lattice = LatticeAllocator()(
            shape=config.lattice.shape,
            spacing=config.lattice.spacing,
            dt=config.lattice.dt,
            coupling=config.lattice.coupling,
            nr_ghost_cells=config.lattice.nr_ghost_cells,
        )
        current_generators = [
            MVModel(
                direction=generator.direction,
                orientation=generator.orientation,
                location=generator.location,
                longitudinal_width=generator.longitudinal_width,
                mu=generator.mu,
                seed=generator.seed,
            )
            for generator in config.current_generators
        ]
        diagnostics = [
            ProjectedEnergyDensity(
                path=diagnostic.path,
                time_interval=diagnostic.time_interval,
                direction=diagnostic.direction,
                output_directory=config.output_directory,
            )
            for diagnostic in config.diagnostics.projected_energy_density
        ]
        diagnostics += [
            FieldSnapshot(
                prefix=diagnostic.prefix,
                time_interval=diagnostic.time_interval,
                output_directory=config.output_directory,
            )
            for diagnostic in config.diagnostics.field_snapshots
        ]
        return cls(
            lattice=lattice,
            particles=particles,
            nr_threads=config.nr_threads,
            current_generators=current_generators,
            diagnostics=diagnostics,
        )

    @property
    def time(self) -> float:
        return self.lattice.time(self.step_count)

    def initialize(self):
        for generator in self.current_generators:
            generator.initialize_current(self.lattice)
        for diagnostic in self.diagnostics:
            diagnostic.initialize(self.lattice, self.cell_iterator)
        logger.info(
            "Initialized simulation on %r with %d threads, %d current generators, %d diagnostics",
            self.lattice, self.nr_threads, len(self.current_generators), len(self.diagnostics),
        )

    def calculate_diagnostics(self):
        for diagnostic in self.diagnostics:
            diagnostic.calculate(self.lattice, self.particles, self.step_count)

    def step(self):
        self.calculate_diagnostics()

        # Sources
        if self.particle_pusher is not None and self.particles is not None:
            self.particle_pusher(self.lattice, self.particles)
        self.deposition(self.lattice, self.particles, self.cell_iterator)
        for generator in self.current_generators:
            generator.apply_current(self.lattice, self.cell_iterator, self.time)

        # Fields
        self.field_solver(self.lattice)
        self.step_count += 1

    def run(self, nr_steps: int):
        for _ in range(nr_steps):
            self.step()
        logger.info("Finished %d steps, simulated time %g", nr_steps, self.time)

    def close(self):
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
