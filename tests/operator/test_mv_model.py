import pytest

import numpy as np

from lattice_pulse.errors import ConfigurationError
from lattice_pulse.operator.allocator import LatticeAllocator
from lattice_pulse.operator.cell_access import ParallelCellIterator, SequentialCellIterator
from lattice_pulse.operator.current_generator import MVModel


def test_transversal_charge_is_neutral_and_seeded():
    lattice = LatticeAllocator()(shape=(6, 5, 16), spacing=0.5, dt=0.1)

    first = MVModel(direction=2, orientation=1, location=4.0, longitudinal_width=1.0, mu=0.3, seed=11)
    second = MVModel(direction=2, orientation=1, location=4.0, longitudinal_width=1.0, mu=0.3, seed=11)
    sheet = first.initialize_current(lattice)
    other = second.initialize_current(lattice)

    assert sheet.transversal_charge.shape == (6, 5)
    assert sheet.transversal_charge.sum() == pytest.approx(0.0, abs=1e-12)
    assert np.array_equal(sheet.transversal_charge, other.transversal_charge)


def test_location_is_wrapped():
    lattice = LatticeAllocator()(shape=(4, 10), spacing=1.0, dt=0.1)
    model = MVModel(direction=1, orientation=-1, location=-3.0, longitudinal_width=1.0, mu=1.0, seed=0)
    assert model.initialize_current(lattice).location == pytest.approx(7.0)
    model = MVModel(direction=1, orientation=1, location=12.0, longitudinal_width=1.0, mu=1.0, seed=0)
    assert model.initialize_current(lattice).location == pytest.approx(2.0)


def test_apply_current():
    lattice = LatticeAllocator()(shape=(4, 3, 20), spacing=1.0, dt=0.1)
    model = MVModel(direction=2, orientation=-1, location=10.0, longitudinal_width=1.5, mu=0.8, seed=5)
    sheet = model.initialize_current(lattice)

    with ParallelCellIterator(4) as cell_iterator:
        model.apply_current(lattice, cell_iterator, time=2.0)

    # Current along the direction of movement only, j = orientation * rho
    assert np.allclose(lattice.current[2], -lattice.charge[0])
    assert np.allclose(lattice.current[:2], 0.0)

    # Longitudinal profile peaks around location + orientation * time
    profile = np.abs(lattice.charge[0]).sum(axis=(0, 1))
    assert np.argmax(profile) in (7, 8)

    # Integrating out the longitudinal profile recovers the transversal charge
    assert np.allclose(lattice.charge[0].sum(axis=2), sheet.transversal_charge, atol=1e-4)


def test_sequential_and_parallel_agree():
    lattice_a = LatticeAllocator()(shape=(3, 8), spacing=1.0, dt=0.1)
    lattice_b = LatticeAllocator()(shape=(3, 8), spacing=1.0, dt=0.1)
    model = MVModel(direction=1, orientation=1, location=2.0, longitudinal_width=1.0, mu=1.0, seed=2)
    model.initialize_current(lattice_a)

    model.apply_current(lattice_a, SequentialCellIterator(), time=0.5)
    with ParallelCellIterator(3) as cell_iterator:
        model.apply_current(lattice_b, cell_iterator, time=0.5)
    assert np.array_equal(lattice_a.charge, lattice_b.charge)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(direction=0, orientation=0, location=0.0, longitudinal_width=1.0, mu=1.0),
        dict(direction=0, orientation=1, location=0.0, longitudinal_width=0.0, mu=1.0),
        dict(direction=0, orientation=1, location=0.0, longitudinal_width=1.0, mu=-1.0),
    ],
)
def test_invalid_parameters(kwargs):
    with pytest.raises(ConfigurationError):
        MVModel(**kwargs)


def test_invalid_direction():
    lattice = LatticeAllocator()(shape=(4, 4), spacing=1.0, dt=0.1)
    model = MVModel(direction=2, orientation=1, location=0.0, longitudinal_width=1.0, mu=1.0)
    with pytest.raises(ConfigurationError):
        model.initialize_current(lattice)
    with pytest.raises(RuntimeError):
        model.apply_current(lattice, SequentialCellIterator(), 0.0)
