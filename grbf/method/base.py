import copy
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
import numpy as np
from tqdm import tqdm
from ..core.constraints import Constraints
from ..core.polynomial import PolynomialBasis
from ..exceptions import AssemblyError, ModelNotSolvedError
from ..kernel.kernel import Kernel
from ..parameters import ModelParameters
from ..routines.greedy import minimal_input

logger = logging.getLogger(__name__)

EVALUATION_CHUNK_SIZE = 2048


class InternalParameters:
    """
    Counts derived from the constraint store and the configuration.

    Recomputed by ``compute_parameters()`` before every assembly; the square
    system has ``n_equality + n_poly_terms`` rows.
    """
    def __init__(self):
        self.n_interface = 0
        self.n_planar = 0
        self.n_tangent = 0
        self.n_inequality = 0
        self.n_constraints = 0
        self.n_equality = 0
        self.n_poly_terms = 0
        self.poly_term = False
        self.modified_basis = False
        self.problem_type = "linear"

    def __repr__(self):
        return "InternalParameters({})".format(
            ", ".join("{}={!r}".format(key, value) for key, value in vars(self).items()))

    @property
    def system_size(self):
        return self.n_equality + self.n_poly_terms


class ModelingMethod(ABC):
    """
    Common contract of the GRBF modeling strategies.

    A modeling method owns a constraint store, a kernel, and at most one
    solver with its weight vector. ``setup_system_solver()`` assembles and
    solves the system and swaps the new solver in only once the solve has
    succeeded; any failure leaves the method without weights, and every
    evaluation call on it raises ModelNotSolvedError.
    """
    model_type = None
    constraint_types = ()

    def __init__(self, parameters=None, constraints=None):
        if parameters is None:
            parameters = ModelParameters(model_type=self.model_type)
        self.parameters = parameters
        self.constraints = constraints if constraints is not None else Constraints()
        self.intern_params = InternalParameters()
        self.kernel = None
        self.p_basis = None
        self.solver = None
        self._solved_state = None
        self._iteration = 0

    def __repr__(self):
        return "{}({!r})".format(type(self).__name__, self.constraints)

    def set_data(self, constraints):
        """
        Replace the constraint store. Previous weights are discarded.
        """
        self.constraints = constraints
        self.solver = None
        self._solved_state = None
        return None

    # ------------------------------------------------------------------
    # Parameters and assembly
    # ------------------------------------------------------------------
    @abstractmethod
    def compute_parameters(self):
        """
        Recompute the internal parameters from the constraint counts.
        """

    @abstractmethod
    def get_equality_values(self):
        """
        Right-hand side of the square system.
        """

    @abstractmethod
    def get_interpolation_matrix(self):
        """
        Square interpolation matrix.

        Raises
        ------
        AssemblyError
            If the input is degenerate or a block is not finite.
        """

    @abstractmethod
    def _create_solver(self, interpolation_matrix, equality_values):
        """
        Solver instance for an assembled system.
        """

    def create_kernel(self):
        return Kernel(self.parameters.kernel_type, self.parameters.shape_parameter)

    def create_polynomial_basis(self, poly_order, include_constant=True):
        basis = PolynomialBasis(poly_order, include_constant=include_constant)
        if basis.n_terms == 0:
            return None
        return basis

    def process_input_data(self):
        """
        Validate the constraint types this method uses.

        Called by ``get_interpolation_matrix()`` before any block is computed.

        Raises
        ------
        AssemblyError
            On non-finite data, zero-length vectors or coincident constraints.
        """
        self.constraints.check(types=self.constraint_types)
        return None

    def _prepare(self):
        self.compute_parameters()
        if self.kernel is None or self.kernel.kernel_type != self.parameters.kernel_type or \
                self.kernel.shape_parameter != float(self.parameters.shape_parameter):
            self.kernel = self.create_kernel()
        return None

    def _fill_blocks(self, matrix, jobs):
        """
        Fill the upper triangle of type-pair blocks and mirror them.

        Parameters
        ----------
        matrix : ndarray
            Matrix to fill in place.
        jobs : list of tuple
            ``(row_offset, col_offset, func)`` where ``func(kernel)`` returns
            the block. Off-diagonal blocks are mirrored into the lower
            triangle.
        """
        def run(job):
            row, col, func = job
            block = np.asarray(func(self.kernel.duplicate()), dtype=float)
            return row, col, block

        n_threads = self.parameters.n_threads
        if n_threads > 1 and len(jobs) > 1:
            with ThreadPoolExecutor(max_workers=n_threads) as executor:
                results = list(executor.map(run, jobs))
        else:
            results = [run(job) for job in jobs]
        for row, col, block in results:
            if not np.all(np.isfinite(block)):
                raise AssemblyError("Kernel block could not be computed.",
                                    {"row_offset": row, "col_offset": col,
                                     "kernel": self.parameters.kernel_type})
            rows, cols = block.shape
            matrix[row:row + rows, col:col + cols] = block
            if row != col:
                matrix[col:col + cols, row:row + rows] = block.T
        return matrix

    # ------------------------------------------------------------------
    # Solve
    # ------------------------------------------------------------------
    def _state(self):
        return (self.constraints.version, tuple(self.constraints.count().items()),
                self.constraints.fingerprint())

    def setup_system_solver(self):
        """
        Assemble the interpolation system and solve it for the weights.

        Raises
        ------
        ConfigurationError
            If the constraints do not fit the configuration.
        AssemblyError
            If a block of the system could not be computed.
        SolverFailure
            If the system is singular, ill-conditioned or infeasible.
        """
        self.solver = None
        self._solved_state = None
        self._prepare()
        n = self.intern_params.system_size
        logger.debug("%s: assembling system of size %d (%r)", type(self).__name__, n, self.intern_params)
        interpolation_matrix = self.get_interpolation_matrix()
        equality_values = self.get_equality_values()
        if interpolation_matrix.shape != (n, n) or equality_values.shape != (n,):
            raise AssemblyError("Assembled system does not match the constraint counts.",
                                {"expected": n, "matrix": interpolation_matrix.shape,
                                 "values": equality_values.shape})
        solver = self._create_solver(interpolation_matrix, equality_values)
        solver.solve()
        self.solver = solver
        self._solved_state = self._state()
        self._iteration += 1
        logger.info("%s: solved system of size %d", type(self).__name__, n)
        return None

    @property
    def is_solved(self):
        return self.solver is not None and self._solved_state == self._state()

    @property
    def weights(self):
        self._check_solved()
        return self.solver.weights

    def _check_solved(self):
        if self.solver is None:
            raise ModelNotSolvedError("No weights available. Call setup_system_solver() first.")
        if self._solved_state != self._state():
            raise ModelNotSolvedError("Constraints changed since the last solve.",
                                      {"solved": self._solved_state[0], "current": self.constraints.version})

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    @abstractmethod
    def _scalar_values(self, kernel, points):
        """
        Scalar interpolant at an (n, 3) array of points.
        """

    @abstractmethod
    def _vector_values(self, kernel, points):
        """
        Vector interpolant at an (n, 3) array of points, shape (n, 3).
        """

    def _evaluate(self, func, points, desc):
        self._check_solved()
        points = np.asarray(points, dtype=float).reshape(-1, 3)
        n_chunks = max(1, int(np.ceil(points.shape[0] / EVALUATION_CHUNK_SIZE)))
        chunks = np.array_split(points, n_chunks)
        disable = not self.parameters.verbose

        def run(chunk):
            return func(self.kernel.duplicate(), chunk)

        if self.parameters.n_threads > 1 and n_chunks > 1:
            with ThreadPoolExecutor(max_workers=self.parameters.n_threads) as executor:
                results = list(tqdm(executor.map(run, chunks), total=n_chunks, desc=desc,
                                    unit='chunk', leave=False, disable=disable))
        else:
            results = [run(chunk) for chunk in tqdm(chunks, desc=desc, unit='chunk', leave=False,
                                                     disable=disable)]
        return np.concatenate(results, axis=0)

    def eval_scalar_interpolant(self, points):
        """
        Evaluate the scalar interpolant at many points.

        Parameters
        ----------
        points : ndarray of shape (n, 3)

        Returns
        -------
        ndarray of shape (n,)
        """
        return self._evaluate(self._scalar_values, points, 'Evaluating scalar field')

    def eval_vector_interpolant(self, points):
        """
        Evaluate the vector interpolant at many points.

        Parameters
        ----------
        points : ndarray of shape (n, 3)

        Returns
        -------
        ndarray of shape (n, 3)
        """
        return self._evaluate(self._vector_values, points, 'Evaluating vector field')

    def eval_scalar_interpolant_at_point(self, p):
        self._check_solved()
        value = self._scalar_values(self.kernel.duplicate(), p.xyz.reshape(1, 3))[0]
        p.set_scalar_field(value)
        return None

    def eval_vector_interpolant_at_point(self, p):
        self._check_solved()
        value = self._vector_values(self.kernel.duplicate(), p.xyz.reshape(1, 3))[0]
        p.set_vector_field(*value)
        return None

    def duplicate(self):
        """
        Independent copy with the same constraints, configuration and weights.
        """
        return copy.deepcopy(self)

    # ------------------------------------------------------------------
    # Greedy hooks
    # ------------------------------------------------------------------
    def get_minimal_and_excluded_input(self):
        """
        Split the constraint store into a seed subset and the excluded rest.

        Returns
        -------
        greedy_input : Constraints
        excluded_input : Constraints
        """
        self.compute_parameters()
        return minimal_input(self.constraints, types=self.constraint_types,
                             group_radius=self.parameters.greedy_group_radius,
                             min_rows=self.intern_params.n_poly_terms)

    @abstractmethod
    def measure_residuals(self, constraints):
        """
        Write the normalised residual of the fit onto every constraint.

        Returns
        -------
        float
            Largest normalised residual; the fit is within tolerance when it
            does not exceed 1.
        """

    def append_greedy_input(self, excluded):
        """
        Move the worst excluded constraints into this method's store.

        Parameters
        ----------
        excluded : Constraints
            Constraints outside the fit, with residuals written by
            ``measure_residuals``.

        Returns
        -------
        int
            Number of constraints moved.
        """
        candidates = [c for c in excluded if c.residual is not None and c.residual > 1.0]
        candidates.sort(key=lambda c: c.residual, reverse=True)
        budget = self.parameters.greedy_batch_size
        if self.parameters.greedy_max_size is not None:
            budget = min(budget, self.parameters.greedy_max_size - len(self.constraints))
        added = candidates[:max(budget, 0)]
        for constraint in added:
            excluded.remove(constraint)
            self.constraints.append(constraint)
        return len(added)
