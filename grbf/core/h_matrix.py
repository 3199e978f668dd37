import numpy as np


def h_matrix(g_, n_kernel):
    r"""
    Energy matrix of an interpolant from its full Gram matrix.

    Parameters
    ----------
    g_ : ndarray of shape (n, n)
        Symmetric matrix whose rows and columns are ordered so that the
        kernel functionals come first. Columns past ``n_kernel`` belong to
        polynomial terms.
    n_kernel : int or ndarray of bool
        Number of leading kernel functionals, or a mask selecting them.

    Returns
    -------
    h_ : ndarray of shape (n, n)
        Copy of ``g_`` with every polynomial row and column set to zero.

    Notes
    -----
    For weights :math:`w` orthogonal to the trend, the native-space energy
    of the interpolant is

    .. math::

        E(w) = \frac{1}{2} w^\top H w

    which is the objective minimised when inequality constraints leave the
    weights under-determined.
    """
    g_ = np.asarray(g_, dtype=float)
    if isinstance(n_kernel, np.ndarray) and n_kernel.dtype == bool:
        mask = n_kernel
    else:
        mask = np.zeros(g_.shape[0], dtype=bool)
        mask[:n_kernel] = True
    h_ = np.zeros_like(g_)
    h_[np.ix_(mask, mask)] = g_[np.ix_(mask, mask)]
    return h_
