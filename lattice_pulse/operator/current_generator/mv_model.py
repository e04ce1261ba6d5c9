import logging
import math
from typing import Optional

import numpy as np

from lattice_pulse.errors import ConfigurationError
from lattice_pulse.functional.indexing import reduce_cell, reduce_shape
from lattice_pulse.operator.cell_access.cell_action import CellAction

logger = logging.getLogger(__name__)


class ColorChargeSheet(CellAction):
    """
    Adds a charge sheet moving at the speed of light to charge and current.

    The sheet has a fixed transversal charge profile and a Gaussian
    longitudinal profile centred at ``location + orientation * time``.
    Every cell only touches its own slots.
    """

    def __init__(
        self,
        transversal_charge: np.ndarray,
        direction: int,
        orientation: int,
        location: float,
        longitudinal_width: float,
    ):
        self.transversal_charge = transversal_charge
        self.direction = direction
        self.orientation = orientation
        self.location = location
        self.longitudinal_width = longitudinal_width
        self.time = 0.0

    def longitudinal_profile(self, lattice, cell) -> float:
        length = lattice.get_num_cells(self.direction) * lattice.spacing
        x = (cell[self.direction] + 0.5) * lattice.spacing
        center = self.location + self.orientation * self.time

        # Periodic minimal distance to the centre of the sheet
        distance = (x - center + 0.5 * length) % length - 0.5 * length
        width = self.longitudinal_width
        return math.exp(-0.5 * (distance / width) ** 2) / (math.sqrt(2.0 * math.pi) * width)

    def execute(self, lattice, cell):
        if not lattice.index_space().contains(cell):
            return
        rho = self.transversal_charge[reduce_cell(cell, self.direction)] * self.longitudinal_profile(lattice, cell)
        index = lattice.storage_index(cell)
        lattice.charge[(0,) + index] += rho
        lattice.current[(self.direction,) + index] += self.orientation * rho


class MVModel:
    """
    McLerran-Venugopalan model color charge sheet.

    Transversal charges are drawn per transversal cell from a Gaussian with
    zero mean and width ``mu / a``; the monopole moment is removed so the
    sheet is globally neutral.

    Parameters
    ----------
    direction : int
        Axis the sheet moves along
    orientation : int
        Direction of movement, -1 or 1
    location : float
        Initial longitudinal position of the sheet, wrapped into the box
    longitudinal_width : float
        Width of the Gaussian longitudinal profile
    mu : float
        MV model parameter controlling the average charge density squared
    seed : int, optional
        Seed of the random charges
    """

    def __init__(
        self,
        direction: int,
        orientation: int,
        location: float,
        longitudinal_width: float,
        mu: float,
        seed: Optional[int] = None,
    ):
        if orientation not in (-1, 1):
            raise ConfigurationError(f"orientation must be -1 or 1, got {orientation}")
        if not longitudinal_width > 0.0:
            raise ConfigurationError(f"longitudinal_width must be positive, got {longitudinal_width}")
        if mu < 0.0:
            raise ConfigurationError(f"mu must be non-negative, got {mu}")
        self.direction = direction
        self.orientation = orientation
        self.location = location
        self.longitudinal_width = longitudinal_width
        self.mu = mu
        self.seed = seed
        self.charge_sheet = None

    def initialize_current(self, lattice):
        if not 0 <= self.direction < lattice.nr_dims:
            raise ConfigurationError(f"direction {self.direction} outside a {lattice.nr_dims}D lattice")

        # Random transversal charge density
        transversal_shape = reduce_shape(lattice.shape, self.direction)
        rng = np.random.default_rng(self.seed)
        gaussian_width = self.mu / lattice.spacing
        transversal_charge = np.asarray(rng.normal(0.0, gaussian_width, size=transversal_shape))

        # Remove monopole moment
        transversal_charge -= transversal_charge.mean()

        # Wrap location
        length = lattice.get_num_cells(self.direction) * lattice.spacing
        location = self.location
        if location < 0.0:
            location += length
        elif location > length:
            location -= length

        self.charge_sheet = ColorChargeSheet(
            transversal_charge=transversal_charge,
            direction=self.direction,
            orientation=self.orientation,
            location=location,
            longitudinal_width=self.longitudinal_width,
        )
        logger.info(
            "MV model along axis %d, orientation %d, location %g, %d transversal cells",
            self.direction, self.orientation, location, transversal_charge.size,
        )
        return self.charge_sheet

    def apply_current(self, lattice, cell_iterator, time: float):
        if self.charge_sheet is None:
            raise RuntimeError("MVModel.apply_current called before initialize_current")
        self.charge_sheet.time = time
        cell_iterator.execute(lattice, self.charge_sheet)
