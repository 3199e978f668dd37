import numpy as np


def a_matrix(m_, n_=None):
    """
    Assemble the full interpolation matrix from its kernel and polynomial blocks.

    Parameters
    ----------
    m_ : ndarray of shape (n, n)
        Kernel Gram block over the equality functionals.
    n_ : ndarray of shape (n, p), optional
        Polynomial block. When omitted or empty the kernel block is returned
        unchanged.

    Returns
    -------
    a_ : ndarray of shape (n + p, n + p)

    Notes
    -----
    The full matrix is assembled as:

    .. math::

        A = \\begin{bmatrix}
                M & N \\\\
                N^T & 0
            \\end{bmatrix}

    The zero block enforces the side conditions that make the weights
    orthogonal to the trend, which keeps the system non-singular for
    conditionally positive definite kernels.
    """
    if n_ is None or n_.shape[1] == 0:
        return np.array(m_, dtype=float)
    n = m_.shape[0]
    p = n_.shape[1]
    a_ = np.zeros((n + p, n + p))
    a_[:n, :n] = m_
    a_[:n, n:] = n_
    a_[n:, :n] = n_.T
    return a_
