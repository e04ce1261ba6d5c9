# Base class for all operators

class Operator:
    """
    Base class for all operators
    """

    def __call__(self, *args, **kwargs):
        """
        Apply the operator to a lattice and its particles.
        """
        raise NotImplementedError
