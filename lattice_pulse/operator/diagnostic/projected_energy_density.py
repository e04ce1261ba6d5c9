import logging
import os
import threading

import numpy as np

from lattice_pulse.errors import CellIteratorError, ConfigurationError
from lattice_pulse.operator.cell_access.cell_action import CellAction
from lattice_pulse.operator.diagnostic.diagnostic import Diagnostic

logger = logging.getLogger(__name__)


def generate_tsv_string(values) -> str:
    return "\t".join(repr(float(v)) for v in values)


class EnergyDensityComputation(CellAction):
    """
    Energy density of every cell summed over the plane transversal to ``direction``.

    Holds four buffers indexed by the coordinate along ``direction``:
    transversal electric, transversal magnetic, longitudinal electric and
    longitudinal magnetic energy density. Field component ``direction``
    counts as longitudinal, the other lattice axes as transversal. Field
    components beyond the lattice dimension do not contribute. Cells that
    are not evaluatable are skipped.

    Parameters
    ----------
    direction : int
        Projection axis
    nr_cells : int
        Number of cells along the projection axis
    """

    def __init__(self, direction: int, nr_cells: int):
        self.direction = direction
        self.nr_cells = nr_cells
        self.transversal_electric = np.zeros(nr_cells, dtype=np.float64)
        self.transversal_magnetic = np.zeros(nr_cells, dtype=np.float64)
        self.longitudinal_electric = np.zeros(nr_cells, dtype=np.float64)
        self.longitudinal_magnetic = np.zeros(nr_cells, dtype=np.float64)
        self.lock = threading.Lock()

    @property
    def buffers(self):
        return (
            self.transversal_electric,
            self.transversal_magnetic,
            self.longitudinal_electric,
            self.longitudinal_magnetic,
        )

    def reset(self):
        for buffer in self.buffers:
            buffer.fill(0.0)

    def convert_to_energy_units(self, lattice):
        # Divide by (g a)^2
        inv_ga = 1.0 / (lattice.spacing * lattice.coupling) ** 2
        for buffer in self.buffers:
            buffer *= inv_ga

    def execute(self, lattice, cell):
        if not lattice.is_evaluatable(cell):
            return

        # transversal & longitudinal energy density of this cell
        t_el = 0.0
        l_el = 0.0
        t_mag = 0.0
        l_mag = 0.0
        for j in range(lattice.nr_dims):
            e = lattice.get_e(cell, j)
            electric = 0.5 * e * e
            magnetic = 0.25 * (lattice.b_squared(cell, j, 0) + lattice.b_squared(cell, j, 1))
            if j == self.direction:
                l_el += electric
                l_mag += magnetic
            else:
                t_el += electric
                t_mag += magnetic

        projected = cell[self.direction]
        with self.lock:
            self.transversal_electric[projected] += t_el
            self.transversal_magnetic[projected] += t_mag
            self.longitudinal_electric[projected] += l_el
            self.longitudinal_magnetic[projected] += l_mag


class ProjectedEnergyDensity(Diagnostic):
    """
    Energy density projected onto one lattice axis.

    Every sample appends five lines to ``path``: the simulated time, then the
    transversal electric, transversal magnetic, longitudinal electric and
    longitudinal magnetic energy density along ``direction``, tab separated.
    From these one gets e.g. the longitudinal pressure (transversal minus
    longitudinal energy density) and the transversal pressure (longitudinal
    energy density).

    Parameters
    ----------
    path : str
        Output file name inside ``output_directory``
    time_interval : float
        Simulated time between two samples
    direction : int
        Projection axis
    output_directory : str
        Directory the output file is written into
    """

    def __init__(self, path: str, time_interval: float, direction: int, output_directory: str = "output"):
        super().__init__(time_interval=time_interval, output_directory=output_directory)
        self.path = path
        self.direction = direction
        self.computation = None
        self.cell_iterator = None

    @property
    def filename(self) -> str:
        return self.output_path(self.path)

    def initialize(self, lattice, cell_iterator):
        if not 0 <= self.direction < lattice.nr_dims:
            raise ConfigurationError(
                f"projection direction {self.direction} outside a {lattice.nr_dims}D lattice"
            )
        super().initialize(lattice, cell_iterator)
        self.cell_iterator = cell_iterator
        self.computation = EnergyDensityComputation(self.direction, lattice.get_num_cells(self.direction))

        # Clear output file
        try:
            os.makedirs(self.output_directory, exist_ok=True)
            with open(self.filename, "w"):
                pass
        except OSError as exc:
            logger.error("ProjectedEnergyDensity: could not clear %s: %s", self.filename, exc)
        logger.info(
            "ProjectedEnergyDensity along axis %d every %d steps into %s",
            self.direction, self.step_interval, self.filename,
        )

    def calculate(self, lattice, particles, step: int) -> bool:
        if not self.is_sampling_step(step):
            return False

        # Compute projected energy density
        self.computation.reset()
        try:
            self.cell_iterator.execute(lattice, self.computation)
        except CellIteratorError:
            logger.error("ProjectedEnergyDensity: sample at step %d is invalid and was discarded", step)
            raise
        self.computation.convert_to_energy_units(lattice)

        # Write to file
        return self.write(lattice.time(step))

    def write(self, time: float) -> bool:
        lines = [repr(float(time))]
        lines.extend(generate_tsv_string(buffer) for buffer in self.computation.buffers)
        try:
            with open(self.filename, "a") as f:
                f.write("\n".join(lines) + "\n")
        except OSError as exc:
            logger.error("ProjectedEnergyDensity: error writing to %s: %s", self.filename, exc)
            return False
        return True
