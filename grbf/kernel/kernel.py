import copy
import numpy as np
from scipy.spatial.distance import cdist
from ..exceptions import ConfigurationError
from .profiles import KERNEL_TYPES

AXES = ('x', 'y', 'z')


def axis_index(axis):
    """
    Convert an axis given as 0/1/2 or 'x'/'y'/'z' to its integer index.
    """
    if isinstance(axis, str):
        try:
            return AXES.index(axis.lower())
        except ValueError:
            raise ValueError("Unknown axis '{}'.".format(axis)) from None
    axis = int(axis)
    if axis < 0 or axis > 2:
        raise ValueError("Axis index must be 0, 1 or 2, got {}.".format(axis))
    return axis


def coordinates(points):
    """
    Return the coordinates of a Point, a sequence of Points, or an array.
    """
    if hasattr(points, 'xyz'):
        return points.xyz
    if isinstance(points, (list, tuple)) and len(points) > 0 and hasattr(points[0], 'xyz'):
        return np.array([p.xyz for p in points], dtype=float)
    return np.asarray(points, dtype=float)


class Kernel:
    r"""
    Radial basis kernel and its derivatives between two (sets of) points.

    The kernel is a radial function :math:`\phi(\|a - b\|)` of a pair of
    points. Derivative queries always refer to the pair fixed by the last
    call to :meth:`set_points`; the pair is the only state carried between
    calls. The points may be single 3-vectors or broadcastable arrays of
    shape ``(..., 3)``, in which case every query returns an array of the
    broadcast shape. This is how the modeling methods fill a whole block
    of the interpolation matrix with one call.

    Parameters
    ----------
    kernel_type : str, optional
        Name of the radial profile. One of ``'cubic'``, ``'quintic'``,
        ``'gaussian'``, ``'multiquadric'``, ``'inverse_multiquadric'`` or
        ``'wendland_c2'``. Default is ``'cubic'``.

    shape_parameter : float, optional
        Shape parameter :math:`\varepsilon` of the profile. Ignored by the
        polyharmonic kernels (cubic, quintic). Default is 1.

    Attributes
    ----------
    a : ndarray of shape (..., 3)
        First point (the evaluation point or the row constraint).

    b : ndarray of shape (..., 3)
        Second point (the column constraint).

    d : ndarray of shape (..., 3)
        Coordinate differences :math:`a - b`.

    r : ndarray of shape (...)
        Distances :math:`\|a - b\|`.

    Notes
    -----
    With :math:`d = a - b`, :math:`r = \|d\|`, :math:`f_1 = \phi'(r)/r`
    and :math:`f_2 = (\phi''(r) - \phi'(r)/r)/r^2`:

    .. math::

        \frac{\partial \phi}{\partial b_s} = -f_1 d_s, \qquad
        \frac{\partial^2 \phi}{\partial a_i \partial b_j} =
            -\left(f_2 d_i d_j + f_1 \delta_{ij}\right)

    The mixed partial is unchanged when the two axes and the two points are
    swapped together, which makes every assembled Gram matrix symmetric.

    Examples
    --------
    .. code-block:: python

        import numpy as np
        from grbf.kernel.kernel import Kernel

        kernel = Kernel('gaussian', shape_parameter=2.0)
        kernel.set_points(np.array([0.0, 0.0, 0.0]), np.array([0.5, 0.0, 0.0]))
        kernel.value()
        kernel.gradient_component('x')
        kernel.mixed_partial('x', 'y')

        # Whole (n, m) block at once
        a = np.random.rand(4, 3)
        b = np.random.rand(5, 3)
        kernel.set_points(a[:, None, :], b[None, :, :])
        block = kernel.mixed_partial(0, 0)  # shape (4, 5)

    """

    def __init__(self, kernel_type='cubic', shape_parameter=1.0):
        if kernel_type not in KERNEL_TYPES:
            raise ConfigurationError("Unknown kernel type '{}'.".format(kernel_type),
                                     {"available": tuple(KERNEL_TYPES)})
        self.kernel_type = kernel_type
        self.shape_parameter = float(shape_parameter)
        self._phi, self._f1, self._f2 = KERNEL_TYPES[kernel_type]
        self.a = None
        self.b = None
        self.d = None
        self.r = None

    def __repr__(self):
        return "Kernel('{}', shape_parameter={})".format(self.kernel_type, self.shape_parameter)

    def set_points(self, a, b):
        """
        Fix the pair of points used by the following derivative queries.

        Parameters
        ----------
        a : Point or array_like of shape (..., 3)
            First point(s).
        b : Point or array_like of shape (..., 3)
            Second point(s). Must broadcast against ``a``.

        Returns
        -------
        None
        """
        self.a = coordinates(a)
        self.b = coordinates(b)
        self.d = self.a - self.b
        if self.a.ndim == 3 and self.b.ndim == 3 and self.a.shape[1] == 1 and self.b.shape[0] == 1:
            # (n, 1, 3) against (1, m, 3): a whole block of pairs
            self.r = cdist(self.a[:, 0, :], self.b[0])
        else:
            self.r = np.sqrt(np.sum(self.d ** 2, axis=-1))
        return None

    def _check_points(self):
        if self.d is None:
            raise ValueError("Kernel points not set. Call set_points() first.")

    def value(self, a=None, b=None):
        """
        Base kernel value for the current pair, or for ``a`` and ``b`` when given.
        """
        if a is not None and b is not None:
            self.set_points(a, b)
        self._check_points()
        return self._phi(self.r, self.shape_parameter)

    def gradient_component(self, axis):
        """
        First partial derivative with respect to one axis of the second point.

        Parameters
        ----------
        axis : int or str
            Axis of the derivative.

        Returns
        -------
        ndarray or float
            :math:`\\partial \\phi / \\partial b_{axis}` for the current pair.
        """
        self._check_points()
        s = axis_index(axis)
        return -self._f1(self.r, self.shape_parameter) * self.d[..., s]

    def mixed_partial(self, axis_i, axis_j):
        """
        Second mixed partial derivative with respect to ``a[axis_i]`` and ``b[axis_j]``.

        Parameters
        ----------
        axis_i : int or str
            Derivative axis of the first point.
        axis_j : int or str
            Derivative axis of the second point.

        Returns
        -------
        ndarray or float
            :math:`\\partial^2 \\phi / \\partial a_i \\partial b_j` for the current pair.
        """
        self._check_points()
        i = axis_index(axis_i)
        j = axis_index(axis_j)
        r = self.r
        f1 = self._f1(r, self.shape_parameter)
        with np.errstate(divide='ignore', invalid='ignore'):
            f2 = self._f2(r, self.shape_parameter)
            outer = np.where(r > 0, f2 * self.d[..., i] * self.d[..., j], 0.0)
        if i == j:
            return -(outer + f1)
        return -outer

    def duplicate(self):
        """
        Return an independent copy that shares no mutable state with this kernel.
        """
        return copy.deepcopy(self)
