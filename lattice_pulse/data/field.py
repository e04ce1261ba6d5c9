import warp as wp

wp.init()


def Field(dtype):
    if dtype == wp.float32:
        return Fieldfloat32
    elif dtype == wp.uint8:
        return Fielduint8
    else:
        raise ValueError('Unknown dtype')


@wp.struct
class Fieldfloat32:
    # Field data, (cardinality, i, j, k) including ghost cells
    data: wp.array4d(dtype=wp.float32)

    # Grid information
    cardinality: wp.int32
    origin: wp.vec3
    spacing: wp.vec3
    shape: wp.vec3i   # physical cells, unused axes have extent 1
    offset: wp.vec3i  # ghost cells in front of the first physical cell


@wp.struct
class Fielduint8:
    # Field data, (cardinality, i, j, k) including ghost cells
    data: wp.array4d(dtype=wp.uint8)

    # Grid information
    cardinality: wp.int32
    origin: wp.vec3
    spacing: wp.vec3
    shape: wp.vec3i
    offset: wp.vec3i
