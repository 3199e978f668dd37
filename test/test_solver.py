import pytest
import numpy as np
from grbf.solver.solver import LinearSolver, Solver
from grbf.exceptions import SolverFailure, ConfigurationError


def test_linear_solve():
    """
    Test the LU solve of a well-conditioned system.
    """
    matrix = np.array([[4.0, 1.0], [1.0, 3.0]])
    values = np.array([1.0, 2.0])
    solver = LinearSolver(matrix, values)
    solution = solver.solve()
    assert solution.success
    assert np.allclose(matrix @ solver.weights, values)
    assert solution.rcond > 0.1


def test_linear_singular():
    """
    Test that a singular system fails instead of returning weights.
    """
    solver = LinearSolver(np.array([[1.0, 2.0], [2.0, 4.0]]), np.ones(2))
    with pytest.raises(SolverFailure):
        solver.solve()
    assert solver.weights is None


def test_linear_ill_conditioned():
    """
    Test that a system below the conditioning threshold fails.
    """
    solver = LinearSolver(np.diag([1.0, 1.0e-20]), np.ones(2))
    with pytest.raises(SolverFailure):
        solver.solve()
    solver = LinearSolver(np.diag([1.0, 1.0e-6]), np.ones(2), rcond_threshold=1.0e-3)
    with pytest.raises(SolverFailure):
        solver.solve()


def test_linear_shape_mismatch():
    """
    Test that inconsistent system sizes are rejected.
    """
    with pytest.raises(SolverFailure):
        LinearSolver(np.eye(2), np.ones(3))
    with pytest.raises(SolverFailure):
        LinearSolver(np.ones((2, 3)), np.ones(2))
    with pytest.raises(SolverFailure):
        LinearSolver(np.zeros((0, 0)), np.zeros(0)).solve()


def test_quadratic_active_inequality():
    """
    Test the minimum norm solution with one active bound.
    """
    # min 0.5 |w|^2  s.t.  w0 + w1 = 2,  w0 >= 1.5
    solver = Solver(np.eye(2), np.array([[1.0, 1.0]]), np.array([2.0]),
                    np.array([[1.0, 0.0]]), np.array([1.5]))
    solution = solver.solve()
    assert solution.success
    assert np.allclose(solver.weights, [1.5, 0.5], atol=1e-6)


def test_quadratic_direction():
    """
    Test that a direction of -1 turns the bound into an upper bound.
    """
    # min 0.5 |w|^2  s.t.  w0 + w1 = 2,  w0 <= 0.5
    solver = Solver(np.eye(2), np.array([[1.0, 1.0]]), np.array([2.0]),
                    np.array([[1.0, 0.0]]), np.array([0.5]), np.array([-1.0]))
    solver.solve()
    assert np.allclose(solver.weights, [0.5, 1.5], atol=1e-6)


def test_quadratic_infeasible():
    """
    Test that contradictory equality and inequality rows fail.
    """
    solver = Solver(np.eye(1), np.array([[1.0]]), np.array([1.0]),
                    np.array([[1.0]]), np.array([2.0]))
    with pytest.raises(SolverFailure):
        solver.solve()


def test_unknown_constrained_method():
    """
    Test that only the supported SciPy methods are accepted.
    """
    solver = Solver(np.eye(1), np.array([[1.0]]), np.array([1.0]), np.zeros((0, 1)), np.zeros(0))
    with pytest.raises(ConfigurationError):
        solver.set_solver(method='L-BFGS-B')
    solver.set_solver(method='trust-constr')
    solver.solve()
    assert np.allclose(solver.weights, [1.0], atol=1e-6)
