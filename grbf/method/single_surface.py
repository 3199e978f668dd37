import logging
import numpy as np
from .base import ModelingMethod
from ..core.a_matrix import a_matrix
from ..core.h_matrix import h_matrix
from ..core.m_matrix import m00, m01, m11, m0t, m1t, mtt
from ..core.n_matrix import n_matrix
from ..exceptions import ConfigurationError
from ..solver.solver import LinearSolver, Solver

logger = logging.getLogger(__name__)


class SingleSurface(ModelingMethod):
    """
    Scalar field through interface, planar, tangent and inequality data.

    The unknowns are ordered as the equality functionals (interface,
    planar x/y/z, tangent), then the polynomial coefficients and, for
    quadratic problems, one weight per inequality constraint.

    Base matrix structure::

        | i/i  i/p  i/t  | N_i |
        | p/i  p/p  p/t  | N_p |
        | t/i  t/p  t/t  | N_t |
        | N_i' N_p' N_t' |  0  |

    Inequality constraints need ``problem_type="quadratic"``. Their rows
    against the system above come from ``get_inequality_matrix()``.
    """
    model_type = "single_surface"
    constraint_types = ('interface', 'planar', 'tangent', 'inequality')

    def compute_parameters(self):
        self.parameters.validate()
        ip = self.intern_params
        # # of constraints for each constraint type ...
        ip.n_interface = len(self.constraints.interface)
        ip.n_inequality = len(self.constraints.inequality)
        ip.n_planar = len(self.constraints.planar)
        ip.n_tangent = len(self.constraints.tangent)
        # Total number of constraints ...
        ip.n_constraints = ip.n_interface + ip.n_inequality + 3 * ip.n_planar + ip.n_tangent
        # Total number of equality constraints
        ip.n_equality = ip.n_interface + 3 * ip.n_planar + ip.n_tangent
        ip.problem_type = self.parameters.problem_type
        if ip.n_inequality > 0 and ip.problem_type != "quadratic":
            raise ConfigurationError("Inequality constraints require a quadratic problem.",
                                     {"n_inequality": ip.n_inequality, "problem_type": ip.problem_type})
        if ip.n_constraints == 0:
            raise ConfigurationError("No constraints to fit.")
        # polynomial parameters ...
        ip.modified_basis = False
        if self.parameters.use_polynomial:
            include_constant = ip.n_interface + ip.n_inequality > 0
            self.p_basis = self.create_polynomial_basis(self.parameters.polynomial_order,
                                                        include_constant=include_constant)
        else:
            self.p_basis = None
        ip.poly_term = self.p_basis is not None
        ip.n_poly_terms = self.p_basis.n_terms if ip.poly_term else 0
        if ip.n_constraints < ip.n_poly_terms:
            raise ConfigurationError("Too few constraints for the polynomial order.",
                                     {"n_constraints": ip.n_constraints, "n_poly_terms": ip.n_poly_terms,
                                      "polynomial_order": self.parameters.polynomial_order})
        return None

    # ------------------------------------------------------------------
    # Assembly
    # ------------------------------------------------------------------
    def get_equality_values(self):
        self._prepare()
        ip = self.intern_params
        equality_values = np.zeros(ip.system_size)
        equality_values[:ip.n_interface] = self.constraints.interface_values()
        equality_values[ip.n_interface:ip.n_interface + 3 * ip.n_planar] = self.constraints.planar_normals().flatten()
        # Tangent rows and polynomial rows stay zero.
        return equality_values

    def get_interpolation_matrix(self):
        self._prepare()
        self.process_input_data()
        ip = self.intern_params
        c = self.constraints
        interface = c.interface_points()
        planar = c.planar_points()
        tangent = c.tangent_points()
        directions = c.tangent_directions()
        i0 = 0
        p0 = ip.n_interface
        t0 = p0 + 3 * ip.n_planar
        jobs = []
        if ip.n_interface > 0:
            jobs.append((i0, i0, lambda kernel: m00(kernel, interface, interface)))
            if ip.n_planar > 0:
                jobs.append((i0, p0, lambda kernel: m01(kernel, interface, planar)))
            if ip.n_tangent > 0:
                jobs.append((i0, t0, lambda kernel: m0t(kernel, interface, tangent, directions)))
        if ip.n_planar > 0:
            jobs.append((p0, p0, lambda kernel: m11(kernel, planar, planar)))
            if ip.n_tangent > 0:
                jobs.append((p0, t0, lambda kernel: m1t(kernel, planar, tangent, directions)))
        if ip.n_tangent > 0:
            jobs.append((t0, t0, lambda kernel: mtt(kernel, tangent, directions, tangent, directions)))
        m_ = np.zeros((ip.n_equality, ip.n_equality))
        self._fill_blocks(m_, jobs)
        if self.parameters.smoothing > 0:
            m_[np.arange(ip.n_interface), np.arange(ip.n_interface)] += self.parameters.smoothing
        if ip.poly_term:
            n_ = n_matrix(self.p_basis, interface, planar, tangent, directions)
        else:
            n_ = None
        return a_matrix(m_, n_)

    def get_inequality_matrix(self):
        """
        Rows of the inequality functionals against every unknown.

        Returns
        -------
        ndarray of shape (n_inequality, system_size + n_inequality)
            ``[C | D]`` where ``C`` holds the inequality rows against the
            equality functionals and polynomial terms, and ``D`` the rows
            against the inequality functionals themselves.
        """
        self._prepare()
        ip = self.intern_params
        c = self.constraints
        n = ip.system_size
        inequality = c.inequality_points()
        kernel = self.kernel.duplicate()
        p0 = ip.n_interface
        t0 = p0 + 3 * ip.n_planar
        matrix = np.zeros((ip.n_inequality, n + ip.n_inequality))
        if ip.n_inequality == 0:
            return matrix
        if ip.n_interface > 0:
            matrix[:, :p0] = m00(kernel, inequality, c.interface_points())
        if ip.n_planar > 0:
            matrix[:, p0:t0] = m01(kernel, inequality, c.planar_points())
        if ip.n_tangent > 0:
            matrix[:, t0:ip.n_equality] = m0t(kernel, inequality, c.tangent_points(), c.tangent_directions())
        if ip.poly_term:
            matrix[:, ip.n_equality:n] = self.p_basis.values(inequality)
        matrix[:, n:] = m00(kernel, inequality, inequality)
        return matrix

    def get_inequality_values(self):
        return self.constraints.inequality_values()

    def get_inequality_directions(self):
        return self.constraints.inequality_directions()

    def _create_solver(self, interpolation_matrix, equality_values):
        if self.intern_params.problem_type != "quadratic":
            return LinearSolver(interpolation_matrix, equality_values,
                                rcond_threshold=self.parameters.rcond_threshold)
        ip = self.intern_params
        n = ip.system_size
        logger.debug("SingleSurface: quadratic problem with %d equality and %d inequality rows",
                     n, ip.n_inequality)
        inequality_matrix = self.get_inequality_matrix()
        c_ = inequality_matrix[:, :n]
        d_ = inequality_matrix[:, n:]
        g_ = np.block([[interpolation_matrix, c_.T], [c_, d_]])
        kernel_mask = np.ones(n + ip.n_inequality, dtype=bool)
        kernel_mask[ip.n_equality:n] = False
        equality_matrix = np.hstack([interpolation_matrix, c_.T])
        x0 = np.concatenate([np.linalg.lstsq(interpolation_matrix, equality_values, rcond=None)[0],
                             np.zeros(ip.n_inequality)])
        solver = Solver(h_matrix(g_, kernel_mask), equality_matrix, equality_values,
                        inequality_matrix, self.get_inequality_values(),
                        self.get_inequality_directions(), x0=x0)
        solver.set_solver(verbose=self.parameters.verbose)
        return solver

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def _split_weights(self):
        ip = self.intern_params
        w = self.solver.weights
        p0 = ip.n_interface
        t0 = p0 + 3 * ip.n_planar
        n = ip.system_size
        return w[:p0], w[p0:t0], w[t0:ip.n_equality], w[ip.n_equality:n], w[n:]

    def _scalar_values(self, kernel, points):
        c = self.constraints
        w_i, w_p, w_t, w_poly, w_q = self._split_weights()
        values = np.zeros(points.shape[0])
        if w_i.size > 0:
            values += m00(kernel, points, c.interface_points()) @ w_i
        if w_p.size > 0:
            values += m01(kernel, points, c.planar_points()) @ w_p
        if w_t.size > 0:
            values += m0t(kernel, points, c.tangent_points(), c.tangent_directions()) @ w_t
        if w_q.size > 0:
            values += m00(kernel, points, c.inequality_points()) @ w_q
        if w_poly.size > 0:
            values += self.p_basis.values(points) @ w_poly
        return values

    def _vector_values(self, kernel, points):
        c = self.constraints
        w_i, w_p, w_t, w_poly, w_q = self._split_weights()
        values = np.zeros((points.shape[0], 3))
        if w_i.size > 0:
            block = m01(kernel, points, c.interface_points())
            for axis in range(3):
                values[:, axis] -= block[:, axis::3] @ w_i
        if w_q.size > 0:
            block = m01(kernel, points, c.inequality_points())
            for axis in range(3):
                values[:, axis] -= block[:, axis::3] @ w_q
        if w_p.size > 0:
            block = m11(kernel, points, c.planar_points())
            for axis in range(3):
                values[:, axis] += block[axis::3, :] @ w_p
        if w_t.size > 0:
            block = m1t(kernel, points, c.tangent_points(), c.tangent_directions())
            for axis in range(3):
                values[:, axis] += block[axis::3, :] @ w_t
        if w_poly.size > 0:
            gradients = self.p_basis.gradients(points)
            for axis in range(3):
                values[:, axis] += gradients[:, :, axis] @ w_poly
        return values

    def measure_residuals(self, constraints):
        """
        Normalised misfit of the fit at every constraint of a store.

        Interface and inequality misfits are divided by ``greedy_tolerance``;
        the angle between the field gradient and a planar normal, and the
        deviation of a tangent from the level surface, by
        ``greedy_angular_tolerance`` (degrees).

        Parameters
        ----------
        constraints : Constraints
            Store whose constraints receive a ``residual`` value.

        Returns
        -------
        float
            Largest normalised residual.
        """
        tol = self.parameters.greedy_tolerance
        angular_tol = self.parameters.greedy_angular_tolerance
        worst = 0.0
        if len(constraints.interface) > 0:
            fitted = self.eval_scalar_interpolant(constraints.interface_points())
            residuals = np.abs(fitted - constraints.interface_values()) / tol
            worst = max(worst, _assign(constraints.interface, residuals))
        if len(constraints.planar) > 0:
            gradient = self.eval_vector_interpolant(constraints.planar_points())
            angles = _angles(gradient, constraints.planar_normals())
            worst = max(worst, _assign(constraints.planar, angles / angular_tol))
        if len(constraints.tangent) > 0:
            gradient = self.eval_vector_interpolant(constraints.tangent_points())
            angles = _angles(gradient, constraints.tangent_directions())
            worst = max(worst, _assign(constraints.tangent, np.abs(90.0 - angles) / angular_tol))
        if len(constraints.inequality) > 0:
            fitted = self.eval_scalar_interpolant(constraints.inequality_points())
            violation = constraints.inequality_directions() * (constraints.inequality_values() - fitted)
            worst = max(worst, _assign(constraints.inequality, np.maximum(violation, 0.0) / tol))
        return worst


def _angles(vectors, references):
    """
    Angle in degrees between matching rows. A zero vector is 90 degrees from
    anything.
    """
    norms = np.linalg.norm(vectors, axis=1) * np.linalg.norm(references, axis=1)
    dots = np.einsum('ij,ij->i', vectors, references)
    with np.errstate(divide='ignore', invalid='ignore'):
        cosine = np.where(norms > 0, dots / norms, 0.0)
    return np.degrees(np.arccos(np.clip(cosine, -1.0, 1.0)))


def _assign(items, residuals):
    for constraint, residual in zip(items, residuals):
        constraint.residual = float(residual)
    return float(np.max(residuals))
