from lattice_pulse.operator.cell_access.cell_action import CellAction


class CurrentReset(CellAction):
    """
    Zero the current and charge density of a cell.

    Every cell owns its own slots, so no locking is needed.
    """

    def execute(self, lattice, cell):
        index = lattice.storage_index(cell)
        lattice.current[(slice(None),) + index] = 0.0
        lattice.charge[(0,) + index] = 0.0
