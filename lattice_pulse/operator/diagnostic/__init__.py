from lattice_pulse.operator.diagnostic.diagnostic import Diagnostic
from lattice_pulse.operator.diagnostic.projected_energy_density import (
    EnergyDensityComputation,
    ProjectedEnergyDensity,
)
from lattice_pulse.operator.diagnostic.field_snapshot import FieldSnapshot
