import pytest
import numpy as np
from grbf.core.polynomial import PolynomialBasis
from grbf.core.n_matrix import n_matrix


def test_n_matrix_shape():
    """
    Test the number of rows and columns of the polynomial block.
    """
    basis = PolynomialBasis(1)
    result = n_matrix(basis, np.zeros((1, 3)), np.eye(3))
    assert result.shape == (10, 4), f"Expected shape (10, 4), got {result.shape}"


def test_n_matrix_rows():
    """
    Test the interface, planar and tangent rows of a linear basis.
    """
    basis = PolynomialBasis(1)
    interface = np.array([[1.0, 2.0, 3.0]])
    planar = np.array([[0.5, 0.5, 0.5]])
    tangent = np.array([[0.0, 0.0, 1.0]])
    direction = np.array([[0.0, 1.0, 0.0]])
    result = n_matrix(basis, interface, planar, tangent, direction)
    assert np.allclose(result[0], [1.0, 1.0, 2.0, 3.0]), "Interface row should hold the monomial values."
    assert np.allclose(result[1:4], [[0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]]), (
        "Planar rows should hold the monomial gradients along x, y and z."
    )
    assert np.allclose(result[4], [0.0, 0.0, 1.0, 0.0]), "Tangent row should be the directional derivative."


def test_n_matrix_constant_only():
    """
    Test a degree-0 basis: ones on value rows, zeros on derivative rows.
    """
    basis = PolynomialBasis(0)
    result = n_matrix(basis, np.random.rand(2, 3), np.random.rand(1, 3))
    assert np.allclose(result[:2], 1.0), "Constant term should be 1 on interface rows."
    assert np.allclose(result[2:], 0.0), "Constant term should vanish on planar rows."


def test_polynomial_terms():
    """
    Test term counts and the gradient of the quadratic basis.
    """
    assert PolynomialBasis(0).n_terms == 1
    assert PolynomialBasis(1).n_terms == 4
    assert PolynomialBasis(2).n_terms == 10
    assert PolynomialBasis(1, include_constant=False).n_terms == 3
    with pytest.raises(ValueError):
        PolynomialBasis(3)
    basis = PolynomialBasis(2)
    points = np.random.rand(3, 3)
    gradients = basis.gradients(points)
    h = 1.0e-6
    for s in range(3):
        step = np.zeros(3)
        step[s] = h
        numeric = (basis.values(points + step) - basis.values(points - step)) / (2 * h)
        assert np.allclose(gradients[:, :, s], numeric, atol=1e-6), f"Gradient mismatch along axis {s}."
