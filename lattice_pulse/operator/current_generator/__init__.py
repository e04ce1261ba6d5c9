from lattice_pulse.operator.current_generator.mv_model import ColorChargeSheet, MVModel
