from typing import Any, Sequence, Tuple
from functools import reduce
from operator import mul

import warp as wp


class IndexSpace:
    """
    Multi-dimensional index space of a lattice.

    Converts between linear cell indices and coordinate tuples in row-major
    order (last axis fastest). With ``nr_extra_cells > 0`` the iteration
    bounds grow by that many halo cells on both sides of every axis, while
    physical cells keep their physical coordinates and ``total_cells`` still
    counts physical cells only.

    Parameters
    ----------
    shape : Sequence[int]
        Number of physical cells along every axis
    nr_extra_cells : int
        Number of halo cells added on each side of every axis
    """

    def __init__(self, shape: Sequence[int], nr_extra_cells: int = 0):
        shape = tuple(int(n) for n in shape)
        if len(shape) == 0:
            raise ValueError("shape must have at least one axis")
        if any(n < 1 for n in shape):
            raise ValueError(f"every axis needs at least one cell, got {shape}")
        if nr_extra_cells < 0:
            raise ValueError(f"nr_extra_cells must be non-negative, got {nr_extra_cells}")

        self.shape = shape
        self.nr_extra_cells = int(nr_extra_cells)
        self.extent = tuple(n + 2 * self.nr_extra_cells for n in shape)
        self.total_cells = reduce(mul, shape, 1)
        self.nr_iteration_cells = reduce(mul, self.extent, 1)

        # Row-major strides over the iteration extent
        strides = [1] * len(shape)
        for axis in range(len(shape) - 2, -1, -1):
            strides[axis] = strides[axis + 1] * self.extent[axis + 1]
        self._strides = tuple(strides)

    @property
    def nr_dims(self) -> int:
        return len(self.shape)

    def index_to_cell(self, index: int) -> Tuple[int, ...]:
        if index < 0 or index >= self.nr_iteration_cells:
            raise IndexError(f"cell index {index} outside [0, {self.nr_iteration_cells})")
        cell = []
        for stride in self._strides:
            c, index = divmod(index, stride)
            cell.append(c - self.nr_extra_cells)
        return tuple(cell)

    def cell_to_index(self, cell: Sequence[int]) -> int:
        if len(cell) != self.nr_dims:
            raise IndexError(f"expected {self.nr_dims} coordinates, got {len(cell)}")
        index = 0
        for c, n, stride in zip(cell, self.extent, self._strides):
            shifted = c + self.nr_extra_cells
            if shifted < 0 or shifted >= n:
                raise IndexError(f"cell {tuple(cell)} outside index space {self.shape}")
            index += shifted * stride
        return index

    def contains(self, cell: Sequence[int]) -> bool:
        """
        True if the coordinate is a physical (non-halo) cell.
        """
        return len(cell) == self.nr_dims and all(0 <= c < n for c, n in zip(cell, self.shape))

    def __iter__(self):
        for index in range(self.nr_iteration_cells):
            yield self.index_to_cell(index)

    def __len__(self):
        return self.nr_iteration_cells

    def __eq__(self, other):
        if not isinstance(other, IndexSpace):
            return NotImplemented
        return self.shape == other.shape and self.nr_extra_cells == other.nr_extra_cells

    def __hash__(self):
        return hash((self.shape, self.nr_extra_cells))

    def __repr__(self):
        return f"IndexSpace(shape={self.shape}, nr_extra_cells={self.nr_extra_cells})"


def reduce_shape(shape: Sequence[int], axis: int) -> Tuple[int, ...]:
    """
    Drop one axis from a shape, giving the transversal shape.
    """
    if axis < 0 or axis >= len(shape):
        raise IndexError(f"axis {axis} outside shape {tuple(shape)}")
    return tuple(n for i, n in enumerate(shape) if i != axis)


def reduce_cell(cell: Sequence[int], axis: int) -> Tuple[int, ...]:
    """
    Drop one coordinate from a cell, giving its transversal position.
    """
    return tuple(c for i, c in enumerate(cell) if i != axis)


@wp.func
def _python_mod(a: wp.int32, b: wp.int32):
    """
    Python modulo function.
    """
    mod = a % b
    if mod < 0:
        mod += b
    return mod


@wp.func
def periodic_indexing(
    data: wp.array4d(dtype=Any),
    shape: wp.vec3i,
    c: wp.int32,
    i: wp.int32,
    j: wp.int32,
    k: wp.int32,
):
    """
    Periodic indexing for 3D data.
    """
    i = _python_mod(i, shape[0])
    j = _python_mod(j, shape[1])
    k = _python_mod(k, shape[2])
    return data[c, i, j, k]


@wp.func
def pos_to_clamped_cell_index(
    pos: wp.vec3,
    origin: wp.vec3,
    spacing: wp.vec3,
    shape: wp.vec3i,
    offset: wp.vec3i,
):
    """
    Convert a position to the storage index of the cell containing it.

    Positions outside the physical volume are attributed to the nearest
    boundary cell.
    """

    float_ijk = wp.cw_div(pos - origin, spacing)
    cell_index = wp.vec3i(
        wp.clamp(wp.int32(wp.floor(float_ijk[0])), 0, shape[0] - 1) + offset[0],
        wp.clamp(wp.int32(wp.floor(float_ijk[1])), 0, shape[1] - 1) + offset[1],
        wp.clamp(wp.int32(wp.floor(float_ijk[2])), 0, shape[2] - 1) + offset[2],
    )
    return cell_index
