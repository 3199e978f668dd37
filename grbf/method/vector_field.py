import logging
import numpy as np
from .base import ModelingMethod
from ..core.m_matrix import m01, m11
from ..exceptions import ConfigurationError
from ..solver.solver import LinearSolver

logger = logging.getLogger(__name__)


class VectorField(ModelingMethod):
    """
    Vector field fitted to planar (normal) observations only.

    The field is the Hermite interpolant of the observed normals: no
    polynomial trend, no interface, tangent or inequality data, and a plain
    linear solve.

    Base matrix structure of one planar/planar pair::

        | p_x/p_x p_x/p_y p_x/p_z |
        | p_y/p_x p_y/p_y p_y/p_z |
        | p_z/p_x p_z/p_y p_z/p_z |
    """
    model_type = "vector_field"
    constraint_types = ('planar',)

    def compute_parameters(self):
        self.parameters.validate()
        if self.parameters.problem_type != "linear":
            raise ConfigurationError("Vector field fitting only supports linear problems.",
                                     {"problem_type": self.parameters.problem_type})
        ignored = {name: n for name, n in self.constraints.count().items() if name != 'planar' and n > 0}
        if ignored:
            logger.warning("Vector field fitting ignores non-planar constraints: %s", ignored)
        ip = self.intern_params
        # # of constraints for each constraint type ...
        ip.n_interface = 0
        ip.n_inequality = 0
        ip.n_planar = len(self.constraints.planar)
        ip.n_tangent = 0
        # Total number of constraints ...
        ip.n_constraints = ip.n_interface + ip.n_inequality + 3 * ip.n_planar + ip.n_tangent
        # Total number of equality constraints
        ip.n_equality = ip.n_interface + 3 * ip.n_planar + ip.n_tangent
        # polynomial parameters ...
        ip.poly_term = False
        ip.modified_basis = False
        ip.problem_type = "linear"
        ip.n_poly_terms = 0
        self.p_basis = None
        if ip.n_planar == 0:
            raise ConfigurationError("Vector field fitting requires at least one planar constraint.")
        return None

    def get_equality_values(self):
        self._prepare()
        equality_values = np.zeros(self.intern_params.system_size)
        equality_values[:3 * self.intern_params.n_planar] = self.constraints.planar_normals().flatten()
        return equality_values

    def get_interpolation_matrix(self):
        self._prepare()
        self.process_input_data()
        n = self.intern_params.system_size
        planar = self.constraints.planar_points()
        interpolation_matrix = np.zeros((n, n))
        self._fill_blocks(interpolation_matrix, [(0, 0, lambda kernel: m11(kernel, planar, planar))])
        return interpolation_matrix

    def _create_solver(self, interpolation_matrix, equality_values):
        return LinearSolver(interpolation_matrix, equality_values,
                            rcond_threshold=self.parameters.rcond_threshold)

    def _scalar_values(self, kernel, points):
        """
        Sum of ``weight[3k + axis] * d phi / d b_axis`` over the planar data.

        This contracts the weights with first derivatives only. It carries
        no interface or trend contribution and so is defined up to an
        additive constant; ``_vector_values`` is the fitted field.
        """
        planar = self.constraints.planar_points()
        return m01(kernel, points, planar) @ self.solver.weights

    def _vector_values(self, kernel, points):
        planar = self.constraints.planar_points()
        block = m11(kernel, points, planar)
        weights = self.solver.weights
        values = np.zeros((points.shape[0], 3))
        for axis in range(3):
            values[:, axis] = block[axis::3, :] @ weights
        return values

    def measure_residuals(self, constraints):
        """
        Distance between the fitted vector and the observed normal at every
        planar constraint, divided by ``greedy_tolerance``.
        """
        planar = constraints.planar
        if len(planar) == 0:
            return 0.0
        fitted = self.eval_vector_interpolant(constraints.planar_points())
        residuals = np.linalg.norm(fitted - constraints.planar_normals(), axis=1) / self.parameters.greedy_tolerance
        for constraint, residual in zip(planar, residuals):
            constraint.residual = float(residual)
        return float(np.max(residuals))
