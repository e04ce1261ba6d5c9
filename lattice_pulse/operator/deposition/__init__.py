from lattice_pulse.operator.deposition.current_reset import CurrentReset
from lattice_pulse.operator.deposition.deposition import ParticleDeposition
