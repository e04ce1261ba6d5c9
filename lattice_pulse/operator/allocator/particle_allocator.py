import numpy as np
import warp as wp

from lattice_pulse.data.particles import Particles
from lattice_pulse.errors import ConfigurationError
from lattice_pulse.operator.operator import Operator


class ParticleAllocator(Operator):
    """
    Allocate particles from numpy positions, velocities and charges.

    Positions and velocities may have fewer than three columns for lower
    dimensional lattices, missing columns are zero.
    """

    @staticmethod
    def _to_vec3(values: np.ndarray, name: str, nr_particles: int):
        values = np.asarray(values, dtype=np.float32)
        if values.ndim == 1:
            values = values[:, None]
        if values.shape[0] != nr_particles or not 1 <= values.shape[1] <= 3:
            raise ConfigurationError(f"{name} must have shape ({nr_particles}, 1..3), got {values.shape}")
        padded = np.zeros((nr_particles, 3), dtype=np.float32)
        padded[:, : values.shape[1]] = values
        return padded

    def __call__(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        charge: np.ndarray,
        device: str = "cpu",
    ):

        # Check charges
        charge = np.atleast_1d(np.asarray(charge, dtype=np.float32))
        nr_particles = charge.shape[0]

        # Allocate the particle data
        particles = Particles()
        particles.position = wp.array(self._to_vec3(position, "position", nr_particles), dtype=wp.vec3, device=device)
        particles.velocity = wp.array(self._to_vec3(velocity, "velocity", nr_particles), dtype=wp.vec3, device=device)
        particles.charge = wp.array(charge, dtype=wp.float32, device=device)

        # Set the number of particles
        particles.nr_particles = nr_particles

        return particles
