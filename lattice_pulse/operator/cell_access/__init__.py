from lattice_pulse.operator.cell_access.cell_action import CellAction
from lattice_pulse.operator.cell_access.cell_iterator import (
    CellIterator,
    SequentialCellIterator,
    ParallelCellIterator,
    WorkerTask,
)
