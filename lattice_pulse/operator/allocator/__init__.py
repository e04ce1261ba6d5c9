from lattice_pulse.operator.allocator.lattice_allocator import FieldAllocator, LatticeAllocator
from lattice_pulse.operator.allocator.particle_allocator import ParticleAllocator
