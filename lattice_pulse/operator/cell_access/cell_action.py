from typing import Tuple


class CellAction:
    """
    Unit of work applied to a single lattice cell.

    Implementations must tolerate concurrent calls for different cells. Any
    state shared between cells has to be guarded by the implementation
    itself, the iterators only guarantee that every cell is visited once.
    """

    def execute(self, lattice, cell: Tuple[int, ...]):
        """
        Process one cell.

        Parameters
        ----------
        lattice : Lattice
            Lattice the cell belongs to
        cell : Tuple[int, ...]
            Coordinate of the cell, one entry per lattice axis
        """
        raise NotImplementedError
