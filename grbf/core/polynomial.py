import numpy as np

# Exponents (px, py, pz) of the monomials of each order, in column order.
_MONOMIALS = {
    0: [(0, 0, 0)],
    1: [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1)],
    2: [(0, 0, 0), (1, 0, 0), (0, 1, 0), (0, 0, 1),
        (2, 0, 0), (0, 2, 0), (0, 0, 2),
        (1, 1, 0), (1, 0, 1), (0, 1, 1)],
}


class PolynomialBasis:
    """
    Monomial trend terms of total degree up to ``order`` in three variables.

    Parameters
    ----------
    order : int
        Polynomial order, 0, 1 or 2.
    include_constant : bool, optional
        Drop the constant monomial when False. Fits that only observe
        derivatives cannot determine it. Default True.
    """
    def __init__(self, order, include_constant=True):
        if order not in _MONOMIALS:
            raise ValueError("Polynomial order must be 0, 1 or 2, got {}.".format(order))
        self.order = order
        self.include_constant = include_constant
        self.exponents = [e for e in _MONOMIALS[order] if include_constant or e != (0, 0, 0)]

    def __len__(self):
        return len(self.exponents)

    @property
    def n_terms(self):
        return len(self.exponents)

    def values(self, points):
        """
        Evaluate every term at every point.

        Parameters
        ----------
        points : ndarray of shape (n, 3)

        Returns
        -------
        ndarray of shape (n, n_terms)
        """
        points = np.asarray(points, dtype=float).reshape(-1, 3)
        out = np.ones((points.shape[0], self.n_terms))
        for m, exponent in enumerate(self.exponents):
            for axis, power in enumerate(exponent):
                if power > 0:
                    out[:, m] *= points[:, axis] ** power
        return out

    def gradients(self, points):
        """
        Evaluate the gradient of every term at every point.

        Parameters
        ----------
        points : ndarray of shape (n, 3)

        Returns
        -------
        ndarray of shape (n, n_terms, 3)
            ``out[i, m, s]`` is the derivative of term ``m`` along axis ``s``
            at point ``i``.
        """
        points = np.asarray(points, dtype=float).reshape(-1, 3)
        out = np.zeros((points.shape[0], self.n_terms, 3))
        for m, exponent in enumerate(self.exponents):
            for s in range(3):
                if exponent[s] == 0:
                    continue
                term = exponent[s] * np.ones(points.shape[0])
                for axis, power in enumerate(exponent):
                    p = power - 1 if axis == s else power
                    if p > 0:
                        term *= points[:, axis] ** p
                out[:, m, s] = term
        return out
