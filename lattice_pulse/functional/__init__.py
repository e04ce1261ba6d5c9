from lattice_pulse.functional.indexing import IndexSpace, reduce_shape, reduce_cell
