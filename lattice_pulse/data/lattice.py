from typing import Sequence, Tuple

from lattice_pulse.data.field import Fieldfloat32, Fielduint8
from lattice_pulse.functional.indexing import IndexSpace

# Number of stored components of the vector fields
NR_COMPONENTS = 3


class Lattice:
    """
    Simulation lattice owning all field arrays.

    The warp fields are the storage used by kernels (field solver,
    deposition). Cell actions read and write the same memory through numpy
    views, so the lattice always lives on the CPU device. Shape, spacing and
    the number of ghost cells are fixed for the lifetime of the object; use
    :class:`~lattice_pulse.operator.allocator.LatticeAllocator` to build a
    differently shaped lattice.

    Parameters
    ----------
    shape : Sequence[int]
        Number of physical cells per axis, 1 to 3 axes
    spacing : float
        Lattice spacing ``a``
    coupling : float
        Gauge coupling ``g``
    dt : float
        Simulation timestep
    nr_ghost_cells : int
        Halo cells on both sides of every lattice axis
    """

    device = "cpu"

    def __init__(
        self,
        shape: Sequence[int],
        spacing: float,
        coupling: float,
        dt: float,
        nr_ghost_cells: int,
        electric_field: Fieldfloat32,
        magnetic_field: Fieldfloat32,
        previous_magnetic_field: Fieldfloat32,
        current_density: Fieldfloat32,
        charge_density: Fieldfloat32,
        evaluatable: Fielduint8,
    ):
        self._shape = tuple(int(n) for n in shape)
        self._spacing = float(spacing)
        self._coupling = float(coupling)
        self._dt = float(dt)
        self._nr_ghost_cells = int(nr_ghost_cells)

        # Index spaces for normal and extra cells mode
        self._index_space = IndexSpace(self._shape)
        self._extra_index_space = IndexSpace(self._shape, self._nr_ghost_cells)

        # Warp fields
        self.electric_field = electric_field
        self.magnetic_field = magnetic_field
        self.previous_magnetic_field = previous_magnetic_field
        self.current_density = current_density
        self.charge_density = charge_density
        self.evaluatable = evaluatable

        # Zero copy numpy views on the warp storage
        self.electric = electric_field.data.numpy()
        self.magnetic = magnetic_field.data.numpy()
        self.previous_magnetic = previous_magnetic_field.data.numpy()
        self.current = current_density.data.numpy()
        self.charge = charge_density.data.numpy()
        self.evaluatable_mask = evaluatable.data.numpy()

        # Storage index padding for unused axes
        self._padding = (0,) * (3 - len(self._shape))

    @property
    def shape(self) -> Tuple[int, ...]:
        return self._shape

    @property
    def spacing(self) -> float:
        return self._spacing

    @property
    def coupling(self) -> float:
        return self._coupling

    @property
    def dt(self) -> float:
        return self._dt

    @property
    def nr_ghost_cells(self) -> int:
        return self._nr_ghost_cells

    @property
    def nr_dims(self) -> int:
        return len(self._shape)

    @property
    def nr_components(self) -> int:
        return NR_COMPONENTS

    @property
    def total_cells(self) -> int:
        return self._index_space.total_cells

    @property
    def storage_shape(self) -> Tuple[int, int, int]:
        return tuple(self.electric.shape[1:])

    def get_num_cells(self, axis: int) -> int:
        return self._shape[axis]

    def index_space(self, include_extra_cells: bool = False) -> IndexSpace:
        if include_extra_cells:
            return self._extra_index_space
        return self._index_space

    def cell_position(self, index: int, include_extra_cells: bool = False) -> Tuple[int, ...]:
        return self.index_space(include_extra_cells).index_to_cell(index)

    def cell_index(self, cell: Sequence[int], include_extra_cells: bool = False) -> int:
        return self.index_space(include_extra_cells).cell_to_index(cell)

    def storage_index(self, cell: Sequence[int]) -> Tuple[int, int, int]:
        """
        Index into the stored (ghost padded, 3D) arrays for a cell coordinate.
        """
        g = self._nr_ghost_cells
        return tuple(c + g for c in cell) + self._padding

    def is_evaluatable(self, cell: Sequence[int]) -> bool:
        if not self._index_space.contains(cell):
            return False
        return bool(self.evaluatable_mask[(0,) + self.storage_index(cell)])

    def set_evaluatable(self, cell: Sequence[int], evaluatable: bool):
        if not self._index_space.contains(cell):
            raise IndexError(f"only physical cells can change evaluatability, got {tuple(cell)}")
        self.evaluatable_mask[(0,) + self.storage_index(cell)] = 1 if evaluatable else 0

    def get_e(self, cell: Sequence[int], component: int) -> float:
        return float(self.electric[(component,) + self.storage_index(cell)])

    def get_b(self, cell: Sequence[int], component: int) -> float:
        return float(self.magnetic[(component,) + self.storage_index(cell)])

    def b_squared(self, cell: Sequence[int], component: int, orientation: int) -> float:
        """
        Squared magnetic field component from one of two estimators.

        Orientation 0 uses the magnetic field after the latest solver step,
        orientation 1 the field from the half step before it.
        """
        if orientation == 0:
            b = self.magnetic[(component,) + self.storage_index(cell)]
        elif orientation == 1:
            b = self.previous_magnetic[(component,) + self.storage_index(cell)]
        else:
            raise ValueError(f"orientation must be 0 or 1, got {orientation}")
        return float(b) * float(b)

    def time(self, step: int) -> float:
        return step * self._dt

    def __repr__(self):
        return (
            f"Lattice(shape={self._shape}, spacing={self._spacing}, coupling={self._coupling}, "
            f"dt={self._dt}, nr_ghost_cells={self._nr_ghost_cells})"
        )
