from lattice_pulse.operator.electromagnetism.yee_cell import (
    YeeElectricFieldUpdate,
    YeeMagneticFieldUpdate,
    YeeFieldSolver,
)
