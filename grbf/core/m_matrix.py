import numpy as np


def _pair(kernel, a_points, b_points):
    a_points = np.asarray(a_points, dtype=float).reshape(-1, 3)
    b_points = np.asarray(b_points, dtype=float).reshape(-1, 3)
    kernel.set_points(a_points[:, None, :], b_points[None, :, :])
    return a_points.shape[0], b_points.shape[0]


def m00(kernel, a_points, b_points):
    r"""
    Compute the value-value block of the kernel Gram matrix.

    Parameters
    ----------
    kernel : Kernel
        Kernel used for the block. Its current point pair is overwritten.
    a_points : ndarray of shape (N, 3)
        Points of the row functionals.
    b_points : ndarray of shape (M, 3)
        Points of the column functionals.

    Returns
    -------
    m00_ : ndarray of shape (N, M)

    Notes
    -----
    .. math::

        M_{00}[i, j] = \phi(\mathbf{a}_i, \mathbf{b}_j)

    Used for interface and inequality constraints, which both observe the
    field value at a point.
    """
    n, m = _pair(kernel, a_points, b_points)
    return np.asarray(kernel.value()).reshape(n, m)


def m01(kernel, a_points, b_points):
    r"""
    Compute the value-gradient block of the kernel Gram matrix.

    Parameters
    ----------
    kernel : Kernel
        Kernel used for the block. Its current point pair is overwritten.
    a_points : ndarray of shape (N, 3)
        Points of the value (row) functionals.
    b_points : ndarray of shape (M, 3)
        Points of the planar (column) functionals.

    Returns
    -------
    m01_ : ndarray of shape (N, 3M)

    Notes
    -----
    .. math::

        M_{01}[i, 3j + s] = \frac{\partial \phi}{\partial b_s}(\mathbf{a}_i, \mathbf{b}_j)

    The transpose of this block is the gradient-value block, so the planar
    row of a mixed pair never needs its own kernel query.
    """
    n, m = _pair(kernel, a_points, b_points)
    m01_ = np.zeros((n, 3 * m))
    for s in range(3):
        m01_[:, s::3] = np.asarray(kernel.gradient_component(s)).reshape(n, m)
    return m01_


def m11(kernel, a_points, b_points):
    r"""
    Compute the gradient-gradient block of the kernel Gram matrix.

    Parameters
    ----------
    kernel : Kernel
        Kernel used for the block. Its current point pair is overwritten.
    a_points : ndarray of shape (N, 3)
        Points of the planar row functionals.
    b_points : ndarray of shape (M, 3)
        Points of the planar column functionals.

    Returns
    -------
    m11_ : ndarray of shape (3N, 3M)

    Notes
    -----
    Each pair of planar constraints contributes the 3x3 sub-block

    .. math::

        M_{11}[3i + k, 3j + l] = \frac{\partial^2 \phi}{\partial a_k \partial b_l}(\mathbf{a}_i, \mathbf{b}_j)

    with rows and columns ordered x, y, z.
    """
    n, m = _pair(kernel, a_points, b_points)
    m11_ = np.zeros((3 * n, 3 * m))
    for k in range(3):
        for l in range(3):
            m11_[k::3, l::3] = np.asarray(kernel.mixed_partial(k, l)).reshape(n, m)
    return m11_


def m0t(kernel, a_points, b_points, b_directions):
    r"""
    Compute the value-tangent block of the kernel Gram matrix.

    .. math::

        M_{0t}[i, j] = \sum_s \tau_{j,s} \frac{\partial \phi}{\partial b_s}(\mathbf{a}_i, \mathbf{b}_j)

    Returns
    -------
    m0t_ : ndarray of shape (N, M)
    """
    n, m = _pair(kernel, a_points, b_points)
    b_directions = np.asarray(b_directions, dtype=float).reshape(-1, 3)
    m0t_ = np.zeros((n, m))
    for s in range(3):
        m0t_ += np.asarray(kernel.gradient_component(s)).reshape(n, m) * b_directions[None, :, s]
    return m0t_


def m1t(kernel, a_points, b_points, b_directions):
    r"""
    Compute the gradient-tangent block of the kernel Gram matrix.

    .. math::

        M_{1t}[3i + k, j] = \sum_s \tau_{j,s}
            \frac{\partial^2 \phi}{\partial a_k \partial b_s}(\mathbf{a}_i, \mathbf{b}_j)

    Returns
    -------
    m1t_ : ndarray of shape (3N, M)
    """
    n, m = _pair(kernel, a_points, b_points)
    b_directions = np.asarray(b_directions, dtype=float).reshape(-1, 3)
    m1t_ = np.zeros((3 * n, m))
    for k in range(3):
        for s in range(3):
            m1t_[k::3, :] += np.asarray(kernel.mixed_partial(k, s)).reshape(n, m) * b_directions[None, :, s]
    return m1t_


def mtt(kernel, a_points, a_directions, b_points, b_directions):
    r"""
    Compute the tangent-tangent block of the kernel Gram matrix.

    .. math::

        M_{tt}[i, j] = \sum_k \sum_s \tau_{i,k} \tau_{j,s}
            \frac{\partial^2 \phi}{\partial a_k \partial b_s}(\mathbf{a}_i, \mathbf{b}_j)

    Returns
    -------
    mtt_ : ndarray of shape (N, M)
    """
    n, m = _pair(kernel, a_points, b_points)
    a_directions = np.asarray(a_directions, dtype=float).reshape(-1, 3)
    b_directions = np.asarray(b_directions, dtype=float).reshape(-1, 3)
    mtt_ = np.zeros((n, m))
    for k in range(3):
        for s in range(3):
            mtt_ += (np.asarray(kernel.mixed_partial(k, s)).reshape(n, m) *
                     a_directions[:, None, k] * b_directions[None, :, s])
    return mtt_
