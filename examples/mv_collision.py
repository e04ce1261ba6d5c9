# Collision of two MV color charge sheets, plotting the projected energy density

import os
import logging

import numpy as np
import matplotlib.pyplot as plt

from lattice_pulse.operator.allocator import LatticeAllocator
from lattice_pulse.operator.current_generator import MVModel
from lattice_pulse.operator.diagnostic import ProjectedEnergyDensity
from lattice_pulse.simulation import Simulation


def read_projected_energy_density(filename):
    # Five lines per sample: time, then four tab separated buffers
    with open(filename) as f:
        lines = f.read().splitlines()
    times = np.array([float(line) for line in lines[0::5]])
    buffers = np.array(
        [[[float(v) for v in line.split("\t")] for line in lines[i::5]] for i in range(1, 5)]
    )
    return times, buffers


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    # Define simulation parameters
    shape = (16, 16, 64)
    spacing = 1.0
    dt = 0.5
    nr_steps = 80
    output_directory = "output/mv_collision"

    # Make operators
    lattice_allocator = LatticeAllocator()
    current_generators = [
        MVModel(direction=2, orientation=1, location=16.0, longitudinal_width=2.0, mu=0.5, seed=1),
        MVModel(direction=2, orientation=-1, location=48.0, longitudinal_width=2.0, mu=0.5, seed=2),
    ]
    energy_density = ProjectedEnergyDensity(
        path="energy_density_z.dat",
        time_interval=1.0,
        direction=2,
        output_directory=output_directory,
    )

    # Allocate lattice
    lattice = lattice_allocator(shape=shape, spacing=spacing, dt=dt, coupling=2.0)

    # Run simulation
    with Simulation(
        lattice,
        nr_threads=4,
        current_generators=current_generators,
        diagnostics=[energy_density],
    ) as simulation:
        simulation.initialize()
        simulation.run(nr_steps)

    # Plot total energy density along z over time
    times, buffers = read_projected_energy_density(energy_density.filename)
    total = buffers.sum(axis=0)
    z = (np.arange(shape[2]) + 0.5) * spacing
    plt.imshow(total, aspect="auto", origin="lower", extent=(z[0], z[-1], times[0], times[-1]))
    plt.xlabel("z")
    plt.ylabel("t")
    plt.colorbar(label="energy density")
    plt.savefig(os.path.join(output_directory, "energy_density_z.png"))
    plt.close()
