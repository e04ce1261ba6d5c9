from lattice_pulse.data.field import Field, Fieldfloat32, Fielduint8
from lattice_pulse.data.particles import Particles
from lattice_pulse.data.lattice import Lattice, NR_COMPONENTS
