import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor, wait

import pytest

from lattice_pulse.errors import CellIteratorError, ConfigurationError
import lattice_pulse.operator.cell_access.cell_iterator as cell_iterator_module
from lattice_pulse.operator.allocator import LatticeAllocator
from lattice_pulse.operator.cell_access import (
    CellAction,
    ParallelCellIterator,
    SequentialCellIterator,
    WorkerTask,
)


class RecordingAction(CellAction):
    """
    Records every visited cell.
    """

    def __init__(self):
        self.visited = []
        self.lock = threading.Lock()

    def execute(self, lattice, cell):
        with self.lock:
            self.visited.append(cell)


class FailingAction(CellAction):
    """
    Fails on every cell whose first coordinate equals ``bad``.
    """

    def __init__(self, bad):
        self.bad = bad
        self.count = 0
        self.lock = threading.Lock()

    def execute(self, lattice, cell):
        with self.lock:
            self.count += 1
        if cell[0] == self.bad:
            raise ValueError(f"bad cell {cell}")


@pytest.mark.parametrize("shape", [(1,), (13,), (4, 5), (3, 2, 5)])
@pytest.mark.parametrize("nr_threads", [1, 2, 3, 7, 64])
def test_parallel_coverage(shape, nr_threads):
    # Make operators
    lattice = LatticeAllocator()(shape=shape, spacing=1.0, dt=0.1)
    action = RecordingAction()

    with ParallelCellIterator(nr_threads) as cell_iterator:
        cell_iterator.execute(lattice, action)

    # Every cell exactly once
    counts = Counter(action.visited)
    assert len(action.visited) == lattice.total_cells
    assert set(counts) == set(lattice.index_space())
    assert all(count == 1 for count in counts.values())


def test_sequential_ascending_order():
    lattice = LatticeAllocator()(shape=(3, 4), spacing=1.0, dt=0.1)
    action = RecordingAction()
    SequentialCellIterator().execute(lattice, action)
    assert action.visited == [lattice.cell_position(i) for i in range(lattice.total_cells)]


@pytest.mark.parametrize("nr_cells", [0, 1, 10, 17])
@pytest.mark.parametrize("nr_threads", [1, 3, 4])
def test_striping(nr_cells, nr_threads):
    tasks = [WorkerTask(t, nr_threads) for t in range(nr_threads)]

    # Worker t visits t, t + T, t + 2T, ...
    for t, task in enumerate(tasks):
        assert list(task.indices(nr_cells)) == [i for i in range(nr_cells) if i % nr_threads == t]

    # Stripes partition the index range
    covered = sorted(i for task in tasks for i in task.indices(nr_cells))
    assert covered == list(range(nr_cells))


def test_worker_task_visits_its_stripe():
    lattice = LatticeAllocator()(shape=(5, 3), spacing=1.0, dt=0.1)
    action = RecordingAction()
    task = WorkerTask(2, 4)
    task(lattice, action, lattice.index_space())
    assert [lattice.cell_index(cell) for cell in action.visited] == [2, 6, 10, 14]


def test_tasks_are_reused():
    lattice = LatticeAllocator()(shape=(6,), spacing=1.0, dt=0.1)
    with ParallelCellIterator(3) as cell_iterator:
        tasks = list(cell_iterator.tasks)
        for _ in range(3):
            action = RecordingAction()
            cell_iterator.execute(lattice, action)
            assert sorted(action.visited) == [(i,) for i in range(6)]
        assert cell_iterator.tasks == tasks


def test_shared_executor():
    lattice = LatticeAllocator()(shape=(4, 4), spacing=1.0, dt=0.1)
    with ThreadPoolExecutor(max_workers=2) as executor:
        cell_iterator = ParallelCellIterator(4, executor=executor)
        action = RecordingAction()
        cell_iterator.execute(lattice, action)
        cell_iterator.shutdown()

        # Pool is owned by the caller and still usable
        assert executor.submit(lambda: 1).result() == 1
    assert len(action.visited) == 16


def test_extra_cells_mode():
    lattice = LatticeAllocator()(shape=(3, 2), spacing=1.0, dt=0.1, nr_ghost_cells=1)
    action = RecordingAction()
    with ParallelCellIterator(2, include_extra_cells=True) as cell_iterator:
        cell_iterator.execute(lattice, action)
    assert len(action.visited) == 5 * 4
    assert set(action.visited) == set(lattice.index_space(include_extra_cells=True))

    action = RecordingAction()
    SequentialCellIterator(include_extra_cells=True).execute(lattice, action)
    assert action.visited == list(lattice.index_space(include_extra_cells=True))


def test_extra_cells_for_one_pass():
    lattice = LatticeAllocator()(shape=(3, 2), spacing=1.0, dt=0.1, nr_ghost_cells=1)
    with ParallelCellIterator(2) as cell_iterator:
        action = RecordingAction()
        cell_iterator.execute(lattice, action, include_extra_cells=True)
        assert len(action.visited) == 5 * 4

        # The next pass is back to physical cells
        action = RecordingAction()
        cell_iterator.execute(lattice, action)
        assert sorted(action.visited) == list(lattice.index_space())


def test_failure_is_aggregated():
    lattice = LatticeAllocator()(shape=(4, 4), spacing=1.0, dt=0.1)
    action = FailingAction(bad=2)

    with ParallelCellIterator(4) as cell_iterator:
        with pytest.raises(CellIteratorError) as excinfo:
            cell_iterator.execute(lattice, action)

    # Each worker hits row 2 once and stops, all errors are reported
    assert len(excinfo.value.errors) == 4
    assert all(isinstance(error, ValueError) for error in excinfo.value.errors)
    assert isinstance(excinfo.value.__cause__, ValueError)


def test_single_failure_is_reported():
    lattice = LatticeAllocator()(shape=(10,), spacing=1.0, dt=0.1)
    action = FailingAction(bad=5)

    with ParallelCellIterator(3) as cell_iterator:
        with pytest.raises(CellIteratorError) as excinfo:
            cell_iterator.execute(lattice, action)
    assert len(excinfo.value.errors) == 1

    # Other workers ran to completion, the failing one stopped at cell 5
    assert action.count == 9


def test_invalid_thread_count():
    with pytest.raises(ConfigurationError):
        ParallelCellIterator(0)


def test_interrupt_is_reported(monkeypatch):
    lattice = LatticeAllocator()(shape=(4, 4), spacing=1.0, dt=0.1)
    action = RecordingAction()
    calls = []

    # Interrupt the first wait, the cleanup wait goes through
    def interrupted_wait(futures):
        calls.append(len(futures))
        if len(calls) == 1:
            raise KeyboardInterrupt
        return wait(futures)

    monkeypatch.setattr(cell_iterator_module, "wait", interrupted_wait)

    with ParallelCellIterator(2) as cell_iterator:
        with pytest.raises(CellIteratorError) as excinfo:
            cell_iterator.execute(lattice, action)

    assert calls == [2, 2]
    assert len(excinfo.value.errors) == 1
    assert isinstance(excinfo.value.errors[0], KeyboardInterrupt)
    assert isinstance(excinfo.value.__cause__, KeyboardInterrupt)
