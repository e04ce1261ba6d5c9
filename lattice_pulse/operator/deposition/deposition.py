import logging

import warp as wp

from lattice_pulse.data.field import Fieldfloat32
from lattice_pulse.data.particles import Particles
from lattice_pulse.functional.indexing import pos_to_clamped_cell_index
from lattice_pulse.operator.cell_access.cell_iterator import CellIterator
from lattice_pulse.operator.deposition.current_reset import CurrentReset
from lattice_pulse.operator.operator import Operator

logger = logging.getLogger(__name__)


class ParticleDeposition(Operator):
    """
    Nearest grid point deposition of particle charge and current.

    The target arrays are reset with a grid pass over all stored cells,
    ghost cells included, then every particle adds ``charge * velocity`` to
    the current and ``charge`` to the charge density of the cell containing
    it. Particles outside the lattice are attributed to the closest boundary
    cell. Particles are processed in parallel and collide on cells, so the
    scatter uses atomic adds.
    """

    current_reset = CurrentReset()

    @wp.kernel
    def _deposit(
        particles: Particles,
        current_density: Fieldfloat32,
        charge_density: Fieldfloat32,
    ):
        # get particle index
        p = wp.tid()

        # get cell of the particle
        ijk = pos_to_clamped_cell_index(
            particles.position[p],
            current_density.origin,
            current_density.spacing,
            current_density.shape,
            current_density.offset,
        )

        # get particle charge and velocity
        q = particles.charge[p]
        v = particles.velocity[p]

        # scatter current and charge
        wp.atomic_add(current_density.data, 0, ijk[0], ijk[1], ijk[2], q * v[0])
        wp.atomic_add(current_density.data, 1, ijk[0], ijk[1], ijk[2], q * v[1])
        wp.atomic_add(current_density.data, 2, ijk[0], ijk[1], ijk[2], q * v[2])
        wp.atomic_add(charge_density.data, 0, ijk[0], ijk[1], ijk[2], q)

    def __call__(
        self,
        lattice,
        particles: Particles,
        cell_iterator: CellIterator,
    ):

        # Reset target arrays, ghost cells included
        cell_iterator.execute(lattice, self.current_reset, include_extra_cells=True)

        # Scatter particles
        if particles is not None and int(particles.nr_particles) > 0:
            wp.launch(
                self._deposit,
                inputs=[particles, lattice.current_density, lattice.charge_density],
                dim=int(particles.nr_particles),
                device=lattice.device,
            )
            wp.synchronize_device(lattice.device)
            logger.debug("Deposited %d particles", int(particles.nr_particles))

        return lattice
