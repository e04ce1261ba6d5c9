# Yee cell field solver operators

import warp as wp

from lattice_pulse.data.field import Fieldfloat32
from lattice_pulse.operator.operator import Operator
from lattice_pulse.functional.indexing import periodic_indexing


@wp.func
def _storage_shape(field: Fieldfloat32):
    return wp.vec3i(field.data.shape[1], field.data.shape[2], field.data.shape[3])


class YeeElectricFieldUpdate(Operator):
    """
    Yee Cell electric field update operator in vacuum
    """

    @wp.kernel
    def _update_electric_field(
        electric_field: Fieldfloat32,
        magnetic_field: Fieldfloat32,
        current_density: Fieldfloat32,
        dt: wp.float32,
    ):
        # get index
        i, j, k = wp.tid()

        # Get coefficients
        c_eh = dt / electric_field.spacing
        c_ej = -dt

        # Get magnetic field stencil
        shape = _storage_shape(magnetic_field)
        m_x_1_1_1 = periodic_indexing(magnetic_field.data, shape, 0, i, j, k)
        m_x_1_0_1 = periodic_indexing(magnetic_field.data, shape, 0, i, j - 1, k)
        m_x_1_1_0 = periodic_indexing(magnetic_field.data, shape, 0, i, j, k - 1)
        m_y_1_1_1 = periodic_indexing(magnetic_field.data, shape, 1, i, j, k)
        m_y_0_1_1 = periodic_indexing(magnetic_field.data, shape, 1, i - 1, j, k)
        m_y_1_1_0 = periodic_indexing(magnetic_field.data, shape, 1, i, j, k - 1)
        m_z_1_1_1 = periodic_indexing(magnetic_field.data, shape, 2, i, j, k)
        m_z_0_1_1 = periodic_indexing(magnetic_field.data, shape, 2, i - 1, j, k)
        m_z_1_0_1 = periodic_indexing(magnetic_field.data, shape, 2, i, j - 1, k)

        # Get curl of magnetic field
        curl_h_x = (m_z_1_1_1 - m_z_1_0_1) - (m_y_1_1_1 - m_y_1_1_0)
        curl_h_y = (m_x_1_1_1 - m_x_1_1_0) - (m_z_1_1_1 - m_z_0_1_1)
        curl_h_z = (m_y_1_1_1 - m_y_0_1_1) - (m_x_1_1_1 - m_x_1_0_1)
        curl_h = wp.vec3(curl_h_x, curl_h_y, curl_h_z)

        # compute new electric field
        e = wp.vec3f(
            electric_field.data[0, i, j, k],
            electric_field.data[1, i, j, k],
            electric_field.data[2, i, j, k],
        )
        cur = wp.vec3f(
            current_density.data[0, i, j, k],
            current_density.data[1, i, j, k],
            current_density.data[2, i, j, k],
        )
        new_e = e + wp.cw_mul(c_eh, curl_h) + c_ej * cur

        # Set electric field
        electric_field.data[0, i, j, k] = new_e[0]
        electric_field.data[1, i, j, k] = new_e[1]
        electric_field.data[2, i, j, k] = new_e[2]

    def __call__(
        self,
        lattice,
    ):
        # Launch kernel
        wp.launch(
            self._update_electric_field,
            inputs=[
                lattice.electric_field,
                lattice.magnetic_field,
                lattice.current_density,
                lattice.dt,
            ],
            dim=lattice.storage_shape,
            device=lattice.device,
        )
        return lattice.electric_field


class YeeMagneticFieldUpdate(Operator):
    """
    Magnetic field update operator in vacuum

    Keeps the field of the previous half step in ``previous_magnetic_field``.
    """

    @wp.kernel
    def _update_magnetic_field(
        electric_field: Fieldfloat32,
        magnetic_field: Fieldfloat32,
        previous_magnetic_field: Fieldfloat32,
        dt: wp.float32,
    ):
        # get index
        i, j, k = wp.tid()

        # Get coefficients
        c_he = dt / magnetic_field.spacing

        # Get electric field stencil
        shape = _storage_shape(electric_field)
        e_x_0_0_0 = periodic_indexing(electric_field.data, shape, 0, i, j, k)
        e_x_0_1_0 = periodic_indexing(electric_field.data, shape, 0, i, j + 1, k)
        e_x_0_0_1 = periodic_indexing(electric_field.data, shape, 0, i, j, k + 1)
        e_y_0_0_0 = periodic_indexing(electric_field.data, shape, 1, i, j, k)
        e_y_1_0_0 = periodic_indexing(electric_field.data, shape, 1, i + 1, j, k)
        e_y_0_0_1 = periodic_indexing(electric_field.data, shape, 1, i, j, k + 1)
        e_z_0_0_0 = periodic_indexing(electric_field.data, shape, 2, i, j, k)
        e_z_1_0_0 = periodic_indexing(electric_field.data, shape, 2, i + 1, j, k)
        e_z_0_1_0 = periodic_indexing(electric_field.data, shape, 2, i, j + 1, k)

        # Get curl of electric field
        curl_e_x = (e_y_0_0_1 - e_y_0_0_0) - (e_z_0_1_0 - e_z_0_0_0)
        curl_e_y = (e_z_1_0_0 - e_z_0_0_0) - (e_x_0_0_1 - e_x_0_0_0)
        curl_e_z = (e_x_0_1_0 - e_x_0_0_0) - (e_y_1_0_0 - e_y_0_0_0)
        curl_e = wp.vec3(curl_e_x, curl_e_y, curl_e_z)

        # compute new magnetic field
        h = wp.vec3f(
            magnetic_field.data[0, i, j, k],
            magnetic_field.data[1, i, j, k],
            magnetic_field.data[2, i, j, k],
        )
        new_h = h + wp.cw_mul(c_he, curl_e)

        # Keep previous magnetic field
        previous_magnetic_field.data[0, i, j, k] = h[0]
        previous_magnetic_field.data[1, i, j, k] = h[1]
        previous_magnetic_field.data[2, i, j, k] = h[2]

        # Set magnetic field
        magnetic_field.data[0, i, j, k] = new_h[0]
        magnetic_field.data[1, i, j, k] = new_h[1]
        magnetic_field.data[2, i, j, k] = new_h[2]

    def __call__(
        self,
        lattice,
    ):
        # Launch kernel
        wp.launch(
            self._update_magnetic_field,
            inputs=[
                lattice.electric_field,
                lattice.magnetic_field,
                lattice.previous_magnetic_field,
                lattice.dt,
            ],
            dim=lattice.storage_shape,
            device=lattice.device,
        )
        return lattice.magnetic_field


class YeeFieldSolver(Operator):
    """
    Leapfrog step of the electric and magnetic fields from the deposited current
    """

    electric_field_update = YeeElectricFieldUpdate()
    magnetic_field_update = YeeMagneticFieldUpdate()

    def __call__(
        self,
        lattice,
    ):
        self.electric_field_update(lattice)
        self.magnetic_field_update(lattice)
        wp.synchronize_device(lattice.device)
        return lattice
