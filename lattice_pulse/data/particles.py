import warp as wp

wp.init()


@wp.struct
class Particles:
    # Primary particle data
    position: wp.array(dtype=wp.vec3)
    velocity: wp.array(dtype=wp.vec3)
    charge: wp.array(dtype=wp.float32)

    # Number of particles
    nr_particles: wp.int32
