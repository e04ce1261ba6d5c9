import logging
import math
from typing import Sequence

import numpy as np
import warp as wp

from lattice_pulse.data.field import Field
from lattice_pulse.data.lattice import Lattice, NR_COMPONENTS
from lattice_pulse.errors import ConfigurationError
from lattice_pulse.operator.operator import Operator

logger = logging.getLogger(__name__)


class FieldAllocator(Operator):

    def __call__(
        self,
        dtype,
        cardinality: int,
        spacing: float,
        shape: Sequence[int],
        nr_ghost_cells: int,
        device: str = "cpu",
    ):

        # Pad shape to three axes, ghost cells only on lattice axes
        padded_shape = [int(s) for s in shape] + [1] * (3 - len(shape))
        offset = [nr_ghost_cells if axis < len(shape) else 0 for axis in range(3)]
        shape_with_ghost = [s + 2 * o for s, o in zip(padded_shape, offset)]

        # Allocate the field
        field = Field(dtype=dtype)()
        field.data = wp.zeros([cardinality] + shape_with_ghost, dtype=dtype, device=device)

        # Grid information
        field.cardinality = wp.int32(cardinality)
        field.origin = wp.vec3(0.0, 0.0, 0.0)
        field.spacing = wp.vec3(spacing, spacing, spacing)
        field.shape = wp.vec3i(padded_shape)
        field.offset = wp.vec3i(offset)

        return field


class LatticeAllocator(Operator):
    """
    Allocate a lattice with all of its fields set to zero.
    """

    field_allocator = FieldAllocator()

    def __call__(
        self,
        shape: Sequence[int],
        spacing: float,
        dt: float,
        coupling: float = 1.0,
        nr_ghost_cells: int = 0,
    ):

        # Check parameters
        shape = tuple(int(n) for n in shape)
        if not 1 <= len(shape) <= 3:
            raise ConfigurationError(f"lattice needs 1 to 3 axes, got shape {shape}")
        if any(n < 1 for n in shape):
            raise ConfigurationError(f"every lattice axis needs at least one cell, got shape {shape}")
        for name, value in (("spacing", spacing), ("dt", dt), ("coupling", coupling)):
            if not math.isfinite(value) or value <= 0.0:
                raise ConfigurationError(f"{name} must be finite and positive, got {value}")
        if nr_ghost_cells < 0:
            raise ConfigurationError(f"nr_ghost_cells must be non-negative, got {nr_ghost_cells}")

        # Courant condition of the Yee scheme
        courant_limit = spacing / math.sqrt(len(shape))
        if dt > courant_limit:
            logger.warning(
                "Timestep %g exceeds the Courant limit %g for a %dD lattice with spacing %g",
                dt, courant_limit, len(shape), spacing,
            )

        # Allocate fields
        fields = {}
        for name, cardinality in (
            ("electric_field", NR_COMPONENTS),
            ("magnetic_field", NR_COMPONENTS),
            ("previous_magnetic_field", NR_COMPONENTS),
            ("current_density", NR_COMPONENTS),
            ("charge_density", 1),
        ):
            fields[name] = self.field_allocator(
                dtype=wp.float32,
                cardinality=cardinality,
                spacing=spacing,
                shape=shape,
                nr_ghost_cells=nr_ghost_cells,
                device=Lattice.device,
            )

        # Physical cells are evaluatable, ghost cells are not
        evaluatable = self.field_allocator(
            dtype=wp.uint8,
            cardinality=1,
            spacing=spacing,
            shape=shape,
            nr_ghost_cells=nr_ghost_cells,
            device=Lattice.device,
        )
        mask = np.zeros(evaluatable.data.shape, dtype=np.uint8)
        physical = tuple(slice(nr_ghost_cells, nr_ghost_cells + n) for n in shape)
        mask[(slice(None),) + physical] = 1
        evaluatable.data = wp.from_numpy(mask, dtype=wp.uint8, device=Lattice.device)

        lattice = Lattice(
            shape=shape,
            spacing=spacing,
            coupling=coupling,
            dt=dt,
            nr_ghost_cells=nr_ghost_cells,
            evaluatable=evaluatable,
            **fields,
        )
        logger.debug("Allocated %r", lattice)
        return lattice
