import pytest
import numpy as np
from grbf.kernel.kernel import Kernel
from grbf.core.m_matrix import m00, m01, m11, m0t, m1t, mtt


def _points():
    return np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.5]])


def test_m00_basic():
    """
    Test m00 for the cubic kernel.
    """
    points = _points()
    result = m00(Kernel('cubic'), points, points)
    assert result.shape == (3, 3), f"Expected shape (3, 3), got {result.shape}"
    assert np.allclose(np.diag(result), 0.0), "Diagonal elements of m00 should be zero."
    assert np.isclose(result[0, 1], 1.0), "Cubic kernel at unit distance should be 1."
    assert np.allclose(result, result.T), "m00 should be symmetric."


def test_m01_basic():
    """
    Test m01 shape, self-interaction and a specific entry.
    """
    points = _points()
    result = m01(Kernel('cubic'), points, points)
    assert result.shape == (3, 9), f"Expected shape (3, 9), got {result.shape}"
    for i in range(3):
        for k in range(3):
            assert result[i, 3 * i + k] == 0.0, f"Element {i, 3 * i + k} (self-interaction) should be zero."
    # d phi / d b_k = 3 r (b_k - a_k)
    dist = np.linalg.norm(points[0] - points[2])
    for k in range(3):
        expected = 3 * dist * (points[2, k] - points[0, k])
        assert np.isclose(result[0, 3 * 2 + k], expected), (
            f"Element {0, 3 * 2 + k} should be {expected}, got {result[0, 3 * 2 + k]}"
        )


def test_m11_symmetry():
    """
    Test that m11 over one point set is symmetric.
    """
    points = np.random.rand(4, 3)
    for kernel_type in ('cubic', 'gaussian', 'multiquadric'):
        result = m11(Kernel(kernel_type, 1.5), points, points)
        assert result.shape == (12, 12), f"Expected shape (12, 12), got {result.shape}"
        assert np.allclose(result, result.T), f"m11 should be symmetric for the {kernel_type} kernel."


def test_m01_transpose_is_gradient_value_block():
    """
    Test that m01(a, b) transposed equals the derivative in the first point of m00(b, a).
    """
    a = np.random.rand(3, 3)
    b = np.random.rand(2, 3) + 2.0
    kernel = Kernel('gaussian', 0.7)
    forward = m01(kernel, a, b)
    h = 1.0e-6
    for k in range(3):
        step = np.zeros(3)
        step[k] = h
        numeric = (m00(kernel, b + step, a) - m00(kernel, b - step, a)) / (2 * h)
        assert np.allclose(forward[:, k::3].T, numeric, atol=1e-6), f"Mismatch along axis {k}."


def test_tangent_blocks_contract_gradient_blocks():
    """
    Test that the tangent blocks are the gradient blocks contracted with the directions.
    """
    a = np.random.rand(3, 3)
    b = np.random.rand(2, 3) + 1.0
    a_dirs = np.random.rand(3, 3)
    b_dirs = np.random.rand(2, 3)
    kernel = Kernel('cubic')
    g01 = m01(kernel, a, b)
    g11 = m11(kernel, a, b)
    expected_0t = np.einsum('nms,ms->nm', g01.reshape(3, 2, 3), b_dirs)
    assert np.allclose(m0t(kernel, a, b, b_dirs), expected_0t), "m0t should contract m01 with the directions."
    expected_1t = np.einsum('nkms,ms->nkm', g11.reshape(3, 3, 2, 3), b_dirs).reshape(9, 2)
    assert np.allclose(m1t(kernel, a, b, b_dirs), expected_1t), "m1t should contract m11 with the directions."
    expected_tt = np.einsum('nk,nkm->nm', a_dirs, expected_1t.reshape(3, 3, 2))
    assert np.allclose(mtt(kernel, a, a_dirs, b, b_dirs), expected_tt), "mtt should contract m1t on both sides."
