from lattice_pulse.operator.saver.field_saver import FieldSaver
