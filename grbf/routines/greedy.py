import logging
from dataclasses import dataclass, field
from typing import Optional
import numpy as np
from scipy.sparse import coo_matrix
from scipy.sparse.csgraph import connected_components
from scipy.spatial import cKDTree
from tqdm import trange
from ..core.constraints import Constraints, CONSTRAINT_TYPES
from ..exceptions import ReductionBudgetExceeded

logger = logging.getLogger(__name__)

# Number of equality rows contributed by one constraint of each type.
_ROWS = {'interface': 1, 'planar': 3, 'tangent': 1, 'inequality': 0}


def _spatial_groups(points, radius=None):
    """
    Label points by connected cluster.

    Two points belong to the same cluster when a chain of points closer than
    ``radius`` joins them. Without a radius every point is in one cluster.

    Returns
    -------
    labels : ndarray of int
    """
    n = points.shape[0]
    if radius is None or n == 0:
        return np.zeros(n, dtype=int)
    pairs = np.array(sorted(cKDTree(points).query_pairs(r=radius)), dtype=int).reshape(-1, 2)
    graph = coo_matrix((np.ones(pairs.shape[0]), (pairs[:, 0], pairs[:, 1])), shape=(n, n))
    _, labels = connected_components(graph, directed=False)
    return labels


def minimal_input(constraints, types=CONSTRAINT_TYPES, group_radius=None, min_rows=0):
    """
    Split a constraint store into a small seed subset and the excluded rest.

    Parameters
    ----------
    constraints : Constraints
        Full constraint store. It is not modified.
    types : sequence of str
        Constraint types used by the fit. Other types are left out of both
        returned stores.
    group_radius : float, optional
        Linking distance of the planar clusters. One planar constraint is
        kept per cluster.
    min_rows : int
        The seed is padded with the farthest remaining interface or planar
        constraints until its equality rows exceed this number.

    Returns
    -------
    greedy_input : Constraints
        Seed subset: the first interface constraint of every distinct level
        and one planar constraint per spatial cluster.
    excluded_input : Constraints
        Every other constraint of the requested types.
    """
    greedy_input = Constraints()
    excluded_input = Constraints()
    if 'interface' in types:
        levels = set()
        for constraint in constraints.interface:
            if constraint.level not in levels:
                levels.add(constraint.level)
                greedy_input.interface.append(constraint)
            else:
                excluded_input.interface.append(constraint)
    if 'planar' in types and len(constraints.planar) > 0:
        labels = _spatial_groups(constraints.planar_points(), group_radius)
        seen = set()
        for label, constraint in zip(labels, constraints.planar):
            if label not in seen:
                seen.add(label)
                greedy_input.planar.append(constraint)
            else:
                excluded_input.planar.append(constraint)
    for name in ('tangent', 'inequality'):
        if name in types:
            getattr(excluded_input, name).extend(getattr(constraints, name))
    _pad(greedy_input, excluded_input, min_rows)
    return greedy_input, excluded_input


def _rows(store):
    return sum(_ROWS[name] * n for name, n in store.count().items())


def _pad(greedy_input, excluded_input, min_rows):
    """
    Farthest-point sampling of interface and planar constraints into the seed.
    """
    candidates = list(excluded_input.interface) + list(excluded_input.planar)
    if _rows(greedy_input) > min_rows or len(candidates) == 0:
        return None
    candidate_points = np.array([c.xyz for c in candidates], dtype=float)
    seed_points = np.array([c.xyz for c in greedy_input], dtype=float).reshape(-1, 3)
    if seed_points.shape[0] > 0:
        distance = cKDTree(seed_points).query(candidate_points)[0]
    else:
        distance = np.full(len(candidates), np.inf)
    available = np.ones(len(candidates), dtype=bool)
    while _rows(greedy_input) <= min_rows and np.any(available):
        idx = int(np.argmax(np.where(available, distance, -1.0)))
        available[idx] = False
        constraint = candidates[idx]
        if constraint in excluded_input.interface:
            excluded_input.interface.remove(constraint)
            greedy_input.interface.append(constraint)
        else:
            excluded_input.planar.remove(constraint)
            greedy_input.planar.append(constraint)
        distance = np.minimum(distance, np.linalg.norm(candidate_points - candidate_points[idx], axis=1))
    return None


@dataclass
class GreedyResult:
    """
    Outcome of a greedy reduction.

    ``error`` is None when every residual met its tolerance. Otherwise it
    holds the ReductionBudgetExceeded describing the best-effort fit in
    ``method``.
    """
    method: object
    converged: bool
    residual: float
    iterations: int
    active: Constraints
    excluded: Constraints
    error: Optional[ReductionBudgetExceeded] = field(default=None)


class GreedyReducer:
    """
    Fit a modeling method on a growing subset of its constraints.

    Starting from the seed of ``get_minimal_and_excluded_input()``, every
    iteration solves the active subset, measures the normalised residual at
    all constraints, and moves the worst violators into the active subset.
    The loop ends when the largest residual is at most 1 or a budget is
    exhausted.

    Parameters
    ----------
    method : ModelingMethod
        Method holding the full constraint store. Its store is replaced by
        the active subset.
    """
    def __init__(self, method):
        self.method = method
        self.result = None

    def run(self):
        """
        Returns
        -------
        GreedyResult

        Raises
        ------
        ConfigurationError, AssemblyError, SolverFailure
            If a fit of the active subset fails.
        """
        method = self.method
        parameters = method.parameters
        parameters.validate()
        full_input = method.constraints
        greedy_input, excluded_input = method.get_minimal_and_excluded_input()
        logger.info("Greedy reduction: seed of %d out of %d constraints", len(greedy_input), len(full_input))
        method.set_data(greedy_input)
        converged = False
        residual = np.inf
        iterations = 0
        for iterations in trange(1, parameters.greedy_max_iterations + 1, desc='Greedy reduction',
                                 unit='iteration', leave=False, disable=not parameters.verbose):
            method.setup_system_solver()
            residual = method.measure_residuals(full_input)
            logger.debug("Greedy iteration %d: active=%d residual=%.3e", iterations, len(method.constraints),
                         residual)
            if residual <= 1.0:
                converged = True
                break
            if parameters.greedy_max_size is not None and len(method.constraints) >= parameters.greedy_max_size:
                break
            if iterations == parameters.greedy_max_iterations:
                break
            if method.append_greedy_input(excluded_input) == 0:
                break
        error = None
        if not converged:
            error = ReductionBudgetExceeded("Greedy reduction did not reach its tolerance.",
                                            float(residual), iterations)
            logger.warning("%s", error)
        else:
            logger.info("Greedy reduction converged after %d iterations with %d of %d constraints",
                        iterations, len(method.constraints), len(full_input))
        self.result = GreedyResult(method=method, converged=converged, residual=float(residual),
                                   iterations=iterations, active=method.constraints,
                                   excluded=excluded_input, error=error)
        return self.result
