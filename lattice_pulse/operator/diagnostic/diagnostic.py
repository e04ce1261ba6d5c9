import logging
import math
import os

from lattice_pulse.errors import ConfigurationError

logger = logging.getLogger(__name__)


class Diagnostic:
    """
    Base class for diagnostics sampled at a fixed time interval.

    Parameters
    ----------
    time_interval : float
        Simulated time between two samples
    output_directory : str
        Directory the diagnostic writes into
    """

    def __init__(self, time_interval: float, output_directory: str = "output"):
        self.time_interval = time_interval
        self.output_directory = output_directory
        self.step_interval = None

    def initialize(self, lattice, cell_iterator):
        """
        Convert the time interval into a step interval, raising
        ``ConfigurationError`` before any step runs if that is impossible.
        """
        self.step_interval = self.compute_step_interval(self.time_interval, lattice.dt)

    @staticmethod
    def compute_step_interval(time_interval: float, dt: float) -> int:
        if not math.isfinite(time_interval) or time_interval <= 0.0:
            raise ConfigurationError(f"time_interval must be finite and positive, got {time_interval}")
        if not math.isfinite(dt) or dt <= 0.0:
            raise ConfigurationError(f"timestep must be finite and positive, got {dt}")
        step_interval = int(round(time_interval / dt))
        if step_interval < 1:
            raise ConfigurationError(
                f"time_interval {time_interval} is shorter than half a timestep {dt}"
            )
        return step_interval

    def is_sampling_step(self, step: int) -> bool:
        if self.step_interval is None:
            raise RuntimeError(f"{type(self).__name__} used before initialize()")
        return step % self.step_interval == 0

    def output_path(self, filename: str) -> str:
        return os.path.join(self.output_directory, filename)

    def calculate(self, lattice, particles, step: int) -> bool:
        """
        Sample the diagnostic if ``step`` is a sampling step.

        Returns True if a sample was taken.
        """
        raise NotImplementedError
