import numpy as np


def n_matrix(basis, interface_points, planar_points, tangent_points=None, tangent_directions=None):
    r"""
    Construct the polynomial block N of the interpolation matrix.

    Each row applies the functional of one equality constraint to every
    term of the polynomial basis, so that ``N[c, m] = L_c p_m``.

    Parameters
    ----------
    basis : PolynomialBasis
        Trend terms of the fit.
    interface_points : ndarray of shape (Ni, 3)
        Positions of the interface constraints (value functionals).
    planar_points : ndarray of shape (Np, 3)
        Positions of the planar constraints (gradient functionals).
    tangent_points : ndarray of shape (Nt, 3), optional
        Positions of the tangent constraints.
    tangent_directions : ndarray of shape (Nt, 3), optional
        Tangent directions (directional derivative functionals).

    Returns
    -------
    n_ : ndarray of shape (Ni + 3 Np + Nt, n_terms)

    Notes
    -----
    - **Interface rows**:

      .. math::

          N_{i, m} = p_m(\mathbf{x}_i)

    - **Planar rows** (three per constraint, x, y, z):

      .. math::

          N_{N_i + 3k + s, m} = \frac{\partial p_m}{\partial x_s}(\mathbf{x}_k)

    - **Tangent rows**:

      .. math::

          N_{N_i + 3 N_p + t, m} = \boldsymbol{\tau}_t \cdot \nabla p_m(\mathbf{x}_t)

    Examples
    --------
    .. code-block:: python

        import numpy as np
        from grbf.core.polynomial import PolynomialBasis
        from grbf.core.n_matrix import n_matrix

        basis = PolynomialBasis(1)
        N = n_matrix(basis, np.zeros((1, 3)), np.eye(3))
        print(N.shape)
        # Output: (10, 4)

    """
    interface_points = np.asarray(interface_points, dtype=float).reshape(-1, 3)
    planar_points = np.asarray(planar_points, dtype=float).reshape(-1, 3)
    if tangent_points is None:
        tangent_points = np.empty((0, 3))
        tangent_directions = np.empty((0, 3))
    tangent_points = np.asarray(tangent_points, dtype=float).reshape(-1, 3)
    tangent_directions = np.asarray(tangent_directions, dtype=float).reshape(-1, 3)
    n_i = interface_points.shape[0]
    n_p = planar_points.shape[0]
    n_t = tangent_points.shape[0]
    n_ = np.zeros((n_i + 3 * n_p + n_t, basis.n_terms))
    n_[:n_i, :] = basis.values(interface_points)
    gradients = basis.gradients(planar_points)
    for s in range(3):
        n_[n_i + s:n_i + 3 * n_p:3, :] = gradients[:, :, s]
    if n_t > 0:
        n_[n_i + 3 * n_p:, :] = np.einsum('tms,ts->tm', basis.gradients(tangent_points), tangent_directions)
    return n_
