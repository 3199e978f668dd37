import numpy as np
from scipy.spatial import cKDTree
from .point import Point
from ..exceptions import AssemblyError

CONSTRAINT_TYPES = ('interface', 'planar', 'tangent', 'inequality')


class Interface(Point):
    """
    Scalar field value observed at a point.
    """
    def __init__(self, x, y, z, level):
        super().__init__(x, y, z)
        self.level = float(level)
        self.residual = None


class Planar(Point):
    """
    Surface normal observed at a point.

    ``polarity`` of -1 marks an overturned observation; the normal used by
    the modeling methods is then reversed.
    """
    def __init__(self, x, y, z, nx, ny, nz, polarity=1):
        super().__init__(x, y, z)
        self.normal = np.array([nx, ny, nz], dtype=float)
        self.polarity = 1 if polarity >= 0 else -1
        self.residual = None

    @property
    def oriented_normal(self):
        return self.polarity * self.normal

    def nx(self):
        return self.oriented_normal[0]

    def ny(self):
        return self.oriented_normal[1]

    def nz(self):
        return self.oriented_normal[2]


class Tangent(Point):
    """
    Direction lying in the surface at a point.
    """
    def __init__(self, x, y, z, tx, ty, tz):
        super().__init__(x, y, z)
        self.direction = np.array([tx, ty, tz], dtype=float)
        self.residual = None


class Inequality(Point):
    """
    One-sided bound on the scalar field at a point.

    ``direction`` of +1 requires the field to be greater than or equal to
    ``level``; -1 requires it to be less than or equal to ``level``.
    """
    def __init__(self, x, y, z, level, direction=1):
        super().__init__(x, y, z)
        self.level = float(level)
        self.direction = 1 if direction >= 0 else -1
        self.residual = None


_TYPE_NAMES = {Interface: 'interface', Planar: 'planar', Tangent: 'tangent', Inequality: 'inequality'}


class Constraints:
    """
    Ordered collections of the four observation types.

    The lists are read directly by the modeling methods. Mutations made
    through the methods of this class increase ``version``; the modeling
    methods compare it, together with ``fingerprint()``, against the state
    they were solved with.
    """
    def __init__(self):
        self.interface = []
        self.planar = []
        self.tangent = []
        self.inequality = []
        self.version = 0

    def __len__(self):
        return len(self.interface) + len(self.planar) + len(self.tangent) + len(self.inequality)

    def __iter__(self):
        for name in CONSTRAINT_TYPES:
            yield from getattr(self, name)

    def __repr__(self):
        return "Constraints({})".format(", ".join("{}={}".format(k, v) for k, v in self.count().items()))

    @classmethod
    def from_arrays(cls, interface=None, planar=None, tangent=None, inequality=None):
        """
        Build a store from arrays of observations.

        Parameters
        ----------
        interface : array_like of shape (n, 4), optional
            Rows of ``x, y, z, level``.
        planar : array_like of shape (n, 6) or (n, 7), optional
            Rows of ``x, y, z, nx, ny, nz[, polarity]``.
        tangent : array_like of shape (n, 6), optional
            Rows of ``x, y, z, tx, ty, tz``.
        inequality : array_like of shape (n, 4) or (n, 5), optional
            Rows of ``x, y, z, level[, direction]``.

        Returns
        -------
        Constraints
        """
        store = cls()
        if interface is not None:
            for row in np.atleast_2d(np.asarray(interface, dtype=float)):
                store.add_interface(*row[:4])
        if planar is not None:
            for row in np.atleast_2d(np.asarray(planar, dtype=float)):
                store.add_planar(*row[:7])
        if tangent is not None:
            for row in np.atleast_2d(np.asarray(tangent, dtype=float)):
                store.add_tangent(*row[:6])
        if inequality is not None:
            for row in np.atleast_2d(np.asarray(inequality, dtype=float)):
                store.add_inequality(*row[:5])
        return store

    def touch(self):
        self.version += 1

    def append(self, constraint):
        name = _TYPE_NAMES.get(type(constraint))
        if name is None:
            raise TypeError("Unsupported constraint type {}.".format(type(constraint).__name__))
        getattr(self, name).append(constraint)
        self.touch()
        return constraint

    def extend(self, constraints):
        for constraint in constraints:
            self.append(constraint)

    def remove(self, constraint):
        getattr(self, _TYPE_NAMES[type(constraint)]).remove(constraint)
        self.touch()

    def add_interface(self, x, y, z, level):
        return self.append(Interface(x, y, z, level))

    def add_planar(self, x, y, z, nx, ny, nz, polarity=1):
        return self.append(Planar(x, y, z, nx, ny, nz, polarity))

    def add_tangent(self, x, y, z, tx, ty, tz):
        return self.append(Tangent(x, y, z, tx, ty, tz))

    def add_inequality(self, x, y, z, level, direction=1):
        return self.append(Inequality(x, y, z, level, direction))

    def copy(self):
        """
        Shallow copy: new lists holding the same constraint objects.
        """
        other = Constraints()
        for name in CONSTRAINT_TYPES:
            setattr(other, name, list(getattr(self, name)))
        return other

    def count(self):
        return {name: len(getattr(self, name)) for name in CONSTRAINT_TYPES}

    def fingerprint(self):
        """
        Hash of every position, level, normal and direction in the store.

        Changes when a constraint is edited or replaced in place, which
        ``version`` does not see.
        """
        arrays = (self.interface_points(), self.interface_values(),
                  self.planar_points(), self.planar_normals(),
                  self.tangent_points(), self.tangent_directions(),
                  self.inequality_points(), self.inequality_values(), self.inequality_directions())
        return hash(tuple(np.ascontiguousarray(a).tobytes() for a in arrays))

    def interface_points(self):
        return _points(self.interface)

    def interface_values(self):
        return np.array([c.level for c in self.interface], dtype=float)

    def planar_points(self):
        return _points(self.planar)

    def planar_normals(self):
        return np.array([c.oriented_normal for c in self.planar], dtype=float).reshape(-1, 3)

    def tangent_points(self):
        return _points(self.tangent)

    def tangent_directions(self):
        return np.array([c.direction for c in self.tangent], dtype=float).reshape(-1, 3)

    def inequality_points(self):
        return _points(self.inequality)

    def inequality_values(self):
        return np.array([c.level for c in self.inequality], dtype=float)

    def inequality_directions(self):
        return np.array([c.direction for c in self.inequality], dtype=float)

    def check(self, types=CONSTRAINT_TYPES, tolerance=0.0):
        """
        Reject input that would make the interpolation system degenerate.

        Parameters
        ----------
        types : sequence of str
            Constraint types to check.
        tolerance : float
            Distance below which two constraints of the same type count as
            coincident.

        Raises
        ------
        AssemblyError
            On non-finite data, zero-length normals or tangents, or
            coincident constraints of the same type.
        """
        for name in types:
            items = getattr(self, name)
            if len(items) == 0:
                continue
            points = _points(items)
            if not np.all(np.isfinite(points)):
                raise AssemblyError("Non-finite coordinates in {} constraints.".format(name))
            if name == 'planar':
                vectors = self.planar_normals()
            elif name == 'tangent':
                vectors = self.tangent_directions()
            else:
                vectors = None
            if vectors is not None:
                magnitudes = np.linalg.norm(vectors, axis=1)
                if not np.all(np.isfinite(magnitudes)) or np.any(magnitudes == 0):
                    bad = np.argwhere(~(magnitudes > 0)).flatten()
                    raise AssemblyError("Zero-length or non-finite {} vectors.".format(name),
                                        {"indices": bad.tolist()})
            else:
                values = np.array([c.level for c in items], dtype=float)
                if not np.all(np.isfinite(values)):
                    raise AssemblyError("Non-finite {} values.".format(name))
            pairs = cKDTree(points).query_pairs(r=tolerance)
            if len(pairs) > 0:
                raise AssemblyError("Coincident {} constraints.".format(name),
                                    {"pairs": sorted(pairs)[:5]})
        return None


def _points(items):
    return np.array([c.xyz for c in items], dtype=float).reshape(-1, 3)
