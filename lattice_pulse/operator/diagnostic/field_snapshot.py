import logging

from lattice_pulse.operator.diagnostic.diagnostic import Diagnostic
from lattice_pulse.operator.saver.field_saver import FieldSaver

logger = logging.getLogger(__name__)


class FieldSnapshot(Diagnostic):
    """
    Periodic VTK snapshot of every lattice field.

    Writes ``{prefix}_{step:06d}.vtk`` into ``output_directory``.
    """

    field_saver = FieldSaver()

    def __init__(self, prefix: str, time_interval: float, output_directory: str = "output"):
        super().__init__(time_interval=time_interval, output_directory=output_directory)
        self.prefix = prefix

    def filename(self, step: int) -> str:
        return self.output_path(f"{self.prefix}_{step:06d}.vtk")

    def initialize(self, lattice, cell_iterator):
        super().initialize(lattice, cell_iterator)
        logger.info("FieldSnapshot %s every %d steps", self.prefix, self.step_interval)

    def calculate(self, lattice, particles, step: int) -> bool:
        if not self.is_sampling_step(step):
            return False
        filename = self.filename(step)
        try:
            self.field_saver(lattice, filename)
        except OSError as exc:
            logger.error("FieldSnapshot: error writing to %s: %s", filename, exc)
            return False
        return True
