import numpy as np


class Point:
    """
    A position in space with the field values fitted at it.

    The modeling methods only read the position and write the results;
    ``scalar_field`` and ``vector_field`` stay ``None`` until an evaluation
    call fills them.
    """
    def __init__(self, x, y, z):
        self.xyz = np.array([x, y, z], dtype=float)
        self.scalar_field = None
        self.vector_field = None

    def __repr__(self):
        return "{}({}, {}, {})".format(type(self).__name__, *self.xyz)

    @property
    def x(self):
        return self.xyz[0]

    @property
    def y(self):
        return self.xyz[1]

    @property
    def z(self):
        return self.xyz[2]

    def set_scalar_field(self, value):
        self.scalar_field = float(value)

    def set_vector_field(self, vx, vy, vz):
        self.vector_field = np.array([vx, vy, vz], dtype=float)
