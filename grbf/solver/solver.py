import logging
import warnings
import numpy as np
from scipy import optimize
from scipy.linalg import lu_factor, lu_solve, LinAlgError, LinAlgWarning
from scipy.linalg.lapack import get_lapack_funcs
from functools import partial
from ..exceptions import SolverFailure, ConfigurationError

logger = logging.getLogger(__name__)


class Solution:
    def __init__(self):
        self.x = None
        self.fun = None
        self.success = False
        self.message = ""
        self.rcond = None


class LinearSolver:
    """
    Direct LU solve of a square interpolation system ``A w = b``.

    The solve fails with a SolverFailure instead of returning weights when
    the matrix is singular or its reciprocal condition number falls below
    ``rcond_threshold``.
    """

    def __init__(self, matrix, values, rcond_threshold=np.finfo(float).eps):
        self.matrix = np.asarray(matrix, dtype=float)
        self.values = np.asarray(values, dtype=float)
        self.rcond_threshold = rcond_threshold
        self.solution = None
        self.weights = None
        if self.matrix.ndim != 2 or self.matrix.shape[0] != self.matrix.shape[1]:
            raise SolverFailure("Interpolation matrix must be square.", {"shape": self.matrix.shape})
        if self.values.shape != (self.matrix.shape[0],):
            raise SolverFailure("Right-hand side does not match the matrix size.",
                                {"matrix": self.matrix.shape, "values": self.values.shape})

    def solve(self):
        n = self.matrix.shape[0]
        if n == 0:
            raise SolverFailure("Empty interpolation system.")
        if not (np.all(np.isfinite(self.matrix)) and np.all(np.isfinite(self.values))):
            raise SolverFailure("Interpolation system contains non-finite entries.")
        try:
            with warnings.catch_warnings():
                warnings.simplefilter('error', LinAlgWarning)
                lu, piv = lu_factor(self.matrix)
        except (LinAlgError, LinAlgWarning, ValueError) as e:
            raise SolverFailure("LU factorization failed: {}".format(e), {"n": n}) from e
        if np.any(np.diag(lu) == 0):
            raise SolverFailure("Interpolation matrix is singular.", {"n": n})
        gecon, = get_lapack_funcs(('gecon',), (lu,))
        rcond, info = gecon(lu, np.linalg.norm(self.matrix, 1), norm='1')
        logger.debug("LU solve: n=%d rcond=%.3e", n, rcond)
        if info != 0 or not rcond >= self.rcond_threshold:
            raise SolverFailure("Interpolation matrix is ill-conditioned.",
                                {"n": n, "rcond": rcond, "threshold": self.rcond_threshold})
        weights = lu_solve((lu, piv), self.values)
        if not np.all(np.isfinite(weights)):
            raise SolverFailure("LU solve produced non-finite weights.", {"n": n})
        solution = Solution()
        solution.x = weights
        solution.fun = float(np.linalg.norm(self.matrix @ weights - self.values))
        solution.success = True
        solution.message = "LU decomposition"
        solution.rcond = float(rcond)
        self.solution = solution
        self.weights = weights
        return solution


class Solver:
    """
    This class defines the constrained (quadratic) solver for interpolation
    problems with inequality constraints.

    The weights minimise the energy ``0.5 w^T H w`` subject to the equality
    rows ``E w = b`` and the one-sided rows ``direction * (C w - level) >= 0``.
    """

    def __init__(self, objective_matrix, equality_matrix, equality_values,
                 inequality_matrix, inequality_values, inequality_directions=None, x0=None):
        self.objective_matrix = np.asarray(objective_matrix, dtype=float)
        self.equality_matrix = np.asarray(equality_matrix, dtype=float)
        self.equality_values = np.asarray(equality_values, dtype=float)
        self.inequality_matrix = np.asarray(inequality_matrix, dtype=float).reshape(-1, self.objective_matrix.shape[0])
        self.inequality_values = np.asarray(inequality_values, dtype=float)
        if inequality_directions is None:
            inequality_directions = np.ones(self.inequality_values.shape[0])
        self.inequality_directions = np.asarray(inequality_directions, dtype=float)
        self.feasibility_tolerance = 1.0e-6
        self.x0 = x0
        self.algorithm = None
        self.solution = None
        self.weights = None

    def set_solver(self, method='SLSQP', verbose=False, maxiter=500):
        """
        This function sets the optimization method used for the constrained problem.
        """
        scipy_solvers = ['SLSQP', 'trust-constr']
        if method not in scipy_solvers:
            raise ConfigurationError("Not an available constrained solver method '{}'.".format(method),
                                     {"available": scipy_solvers})
        options = {'maxiter': maxiter}
        if verbose:
            options['disp'] = True
        self.algorithm = partial(optimize.minimize, method=method, tol=1e-09, options=options)

    def solve(self, x0=None):
        if self.algorithm is None:
            self.set_solver()
        h_ = self.objective_matrix
        e_ = self.equality_matrix
        b_ = self.equality_values
        c_ = self.inequality_directions[:, None] * self.inequality_matrix
        l_ = self.inequality_directions * self.inequality_values
        if x0 is None:
            x0 = self.x0
        if x0 is None:
            x0 = np.linalg.lstsq(e_, b_, rcond=None)[0]
        constraints = [{'type': 'eq', 'fun': lambda w: e_ @ w - b_, 'jac': lambda w: e_}]
        if c_.shape[0] > 0:
            constraints.append({'type': 'ineq', 'fun': lambda w: c_ @ w - l_, 'jac': lambda w: c_})
        try:
            result = self.algorithm(lambda w: 0.5 * w @ h_ @ w, x0, jac=lambda w: h_ @ w,
                                    constraints=constraints)
        except (ValueError, LinAlgError) as e:
            raise SolverFailure("Constrained solve failed: {}".format(e)) from e
        weights = result.x
        scale = 1.0 + np.linalg.norm(b_, np.inf)
        equality_error = np.max(np.abs(e_ @ weights - b_), initial=0.0)
        violation = np.max(l_ - c_ @ weights, initial=0.0)
        logger.debug("Constrained solve: success=%s equality_error=%.3e violation=%.3e",
                     result.success, equality_error, violation)
        if not np.all(np.isfinite(weights)):
            raise SolverFailure("Constrained solve produced non-finite weights.")
        if equality_error > self.feasibility_tolerance * scale or violation > self.feasibility_tolerance * scale:
            raise SolverFailure("Inequality system is infeasible.",
                                {"equality_error": equality_error, "violation": violation,
                                 "message": result.message})
        if not result.success:
            raise SolverFailure("Constrained solve did not converge: {}".format(result.message))
        solution = Solution()
        solution.x = weights
        solution.fun = float(result.fun)
        solution.success = True
        solution.message = str(result.message)
        self.solution = solution
        self.weights = weights
        return solution
