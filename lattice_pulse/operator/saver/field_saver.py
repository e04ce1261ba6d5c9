import os
import numpy as np
import pyvista as pv

from lattice_pulse.operator.operator import Operator


class FieldSaver(Operator):
    """
    Save all lattice fields, ghost cells included, as cell data of a VTK image.
    """

    def __call__(
        self,
        lattice,
        filename: str,
    ):

        # Origin of the first stored cell
        origin = np.zeros(3)
        for axis in range(lattice.nr_dims):
            origin[axis] -= lattice.spacing * lattice.nr_ghost_cells

        # Create the ImageData grid
        grid = pv.ImageData(
            dimensions=tuple(np.array(lattice.storage_shape) + 1),
            spacing=(lattice.spacing,) * 3,
            origin=tuple(origin),
        )

        # Add fields to the ImageData
        fields = {
            "electric_field": lattice.electric,
            "magnetic_field": lattice.magnetic,
            "current_density": lattice.current,
            "charge_density": lattice.charge,
            "evaluatable": lattice.evaluatable_mask,
        }
        for name, np_field in fields.items():
            cardinality = np_field.shape[0]
            if cardinality == 1:
                np_field = np_field[0].flatten(order="F")
            else:
                np_field = np.stack(
                    [np_field[i].flatten(order="F") for i in range(cardinality)],
                    axis=1,
                )

            # Add the field to the grid as cell data
            grid.cell_data[name] = np_field

        # Save the ImageData as an image VTK file
        directory = os.path.dirname(filename)
        if directory:
            os.makedirs(directory, exist_ok=True)
        grid.save(filename)

        return None
