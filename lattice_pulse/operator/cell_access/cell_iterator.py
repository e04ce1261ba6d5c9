import logging
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import List, Optional

from lattice_pulse.errors import CellIteratorError, ConfigurationError
from lattice_pulse.functional.indexing import IndexSpace
from lattice_pulse.operator.cell_access.cell_action import CellAction

logger = logging.getLogger(__name__)


class CellIterator:
    """
    Walks every cell of a lattice and applies a cell action.

    Parameters
    ----------
    include_extra_cells : bool
        Also visit the ghost cells surrounding the physical lattice
    """

    def __init__(self, include_extra_cells: bool = False):
        self.include_extra_cells = include_extra_cells

    def index_space(self, lattice, include_extra_cells: Optional[bool] = None) -> IndexSpace:
        if include_extra_cells is None:
            include_extra_cells = self.include_extra_cells
        return lattice.index_space(include_extra_cells)

    def execute(self, lattice, action: CellAction, include_extra_cells: Optional[bool] = None):
        """
        Apply ``action`` to every cell. ``include_extra_cells`` overrides the
        halo mode of the iterator for this pass only.
        """
        raise NotImplementedError


class SequentialCellIterator(CellIterator):
    """
    Visits cells one after another in ascending index order.
    """

    def execute(self, lattice, action: CellAction, include_extra_cells: Optional[bool] = None):
        index_space = self.index_space(lattice, include_extra_cells)
        for index in range(index_space.nr_iteration_cells):
            action.execute(lattice, index_space.index_to_cell(index))


@dataclass(frozen=True)
class WorkerTask:
    """
    Striped share of a grid pass.

    Worker ``thread_index`` visits ``thread_index, thread_index + nr_threads,
    ...`` below the number of cells.
    """

    thread_index: int
    nr_threads: int

    def indices(self, nr_cells: int) -> range:
        return range(self.thread_index, nr_cells, self.nr_threads)

    def __call__(self, lattice, action: CellAction, index_space: IndexSpace):
        for index in self.indices(index_space.nr_iteration_cells):
            action.execute(lattice, index_space.index_to_cell(index))


class ParallelCellIterator(CellIterator):
    """
    Visits cells with a fixed pool of worker threads using striped partitioning.

    The worker tasks are built once and reused by every call to
    :meth:`execute`. A pass blocks until every task has finished; failures of
    any task are re-raised once as :class:`CellIteratorError`.

    Parameters
    ----------
    nr_threads : int
        Number of worker tasks per pass
    executor : ThreadPoolExecutor, optional
        Pool shared with the rest of the simulation. When omitted the iterator
        creates its own pool and shuts it down in :meth:`shutdown`.
    include_extra_cells : bool
        Also visit the ghost cells surrounding the physical lattice
    """

    def __init__(
        self,
        nr_threads: int,
        executor: Optional[ThreadPoolExecutor] = None,
        include_extra_cells: bool = False,
    ):
        super().__init__(include_extra_cells=include_extra_cells)
        if nr_threads < 1:
            raise ConfigurationError(f"nr_threads must be at least 1, got {nr_threads}")
        self.nr_threads = nr_threads
        self.tasks = [WorkerTask(i, nr_threads) for i in range(nr_threads)]
        self._owns_executor = executor is None
        if executor is None:
            executor = ThreadPoolExecutor(max_workers=nr_threads, thread_name_prefix="cell-iterator")
        self.executor = executor

    def execute(self, lattice, action: CellAction, include_extra_cells: Optional[bool] = None):
        index_space = self.index_space(lattice, include_extra_cells)

        # Dispatch all tasks and wait for every one of them
        futures = [self.executor.submit(task, lattice, action, index_space) for task in self.tasks]
        try:
            wait(futures)
        except KeyboardInterrupt as exc:
            for future in futures:
                future.cancel()
            wait(futures)
            raise CellIteratorError(
                f"{type(action).__name__} pass interrupted", [exc]
            ) from exc

        # Collect failures
        errors: List[BaseException] = []
        for task, future in zip(self.tasks, futures):
            if future.cancelled():
                continue
            error = future.exception()
            if error is not None:
                logger.debug("Worker %d of %s failed: %r", task.thread_index, type(action).__name__, error)
                errors.append(error)
        if errors:
            raise CellIteratorError(
                f"{len(errors)} of {self.nr_threads} workers failed during {type(action).__name__} pass",
                errors,
            ) from errors[0]

    def shutdown(self):
        if self._owns_executor:
            self.executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.shutdown()
