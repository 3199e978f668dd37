"""
The `core` module provides the data types and matrix blocks from which the
modeling methods assemble a generalized radial basis function (GRBF)
interpolation system.

Overview
--------

A GRBF interpolant is a weighted sum of kernel functions, one per observed
functional, plus an optional low-degree polynomial trend:

.. math::

    f(\\mathbf{x}) = \\sum_c w_c \\, L_c^{\\mathbf{b}} \\phi(\\mathbf{x}, \\mathbf{b})
                   + \\sum_m c_m p_m(\\mathbf{x})

The functional :math:`L_c` depends on the type of observation: interface
(and inequality) constraints observe the field value, planar constraints
observe its three partial derivatives, and tangent constraints observe a
directional derivative. Applying every functional to the interpolant gives
the symmetric system

.. math::

    A = \\begin{bmatrix}
            M & N \\\\
            N^T & 0
        \\end{bmatrix}

with :math:`M_{rc} = L_r^{\\mathbf{a}} L_c^{\\mathbf{b}} \\phi(\\mathbf{a}, \\mathbf{b})`
and :math:`N_{cm} = L_c p_m`.

Contents
--------

- **point / constraints**: :class:`Point` and the four constraint types held
  by a :class:`Constraints` store.
- **polynomial**: :class:`PolynomialBasis`, the trend terms.
- **m_matrix**: kernel Gram blocks by functional pair. :func:`m00` (value,
  value), :func:`m01` (value, gradient), :func:`m11` (gradient, gradient)
  and the tangent contractions :func:`m0t`, :func:`m1t`, :func:`mtt`.
- **n_matrix**: :func:`n_matrix`, the polynomial block.
- **a_matrix**: :func:`a_matrix`, the bordered system.
- **h_matrix**: :func:`h_matrix`, the energy matrix minimised by quadratic
  problems.

References
----------

.. [1] Hillier, M. J., Schetselaar, E. M., de Kemp, E. A., & Perron, G. (2014).
       Three-dimensional modelling of geological surfaces using generalized
       interpolation with radial basis functions. *Mathematical Geosciences*,
       46(8), 931-953. https://doi.org/10.1007/s11004-014-9540-3
"""
from .point import Point
from .constraints import Constraints, Interface, Planar, Tangent, Inequality, CONSTRAINT_TYPES
from .polynomial import PolynomialBasis
from .m_matrix import m00, m01, m11, m0t, m1t, mtt
from .n_matrix import n_matrix
from .a_matrix import a_matrix
from .h_matrix import h_matrix
