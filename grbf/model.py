import logging
import numpy as np
from .core.constraints import Constraints
from .exceptions import ModelNotSolvedError
from .method import create_method
from .parameters import ModelParameters
from .routines.greedy import GreedyReducer

logger = logging.getLogger(__name__)


class Model(object):
    def __init__(self, constraints=None, parameters=None, **kwargs):
        """
        The Model class wraps a modeling method behind the
        create -> solve -> evaluate pipeline used to build an
        implicit geological field from observations.

        Parameters
        ----------
        constraints : Constraints, optional
            Observations to fit.
        parameters : ModelParameters, optional
            Configuration of the fit. Keyword arguments are
            forwarded to ModelParameters and override its options.
        """
        if parameters is None:
            parameters = ModelParameters(**kwargs)
        elif kwargs:
            parameters.update(**kwargs)
        self.parameters = parameters
        self.constraints = constraints if constraints is not None else Constraints()
        self.method = None
        self.greedy_result = None

    def set_data(self, constraints):
        self.constraints = constraints
        self.method = None
        self.greedy_result = None
        return None

    def create(self) -> None:
        """
        Select the modeling method for the configured model type and
        compute its internal parameters.

        This is the first step of the pipeline (create -> solve ->
        evaluate). Configuration errors surface here, before any
        matrix work.

        Raises
        ------
        ConfigurationError
            If the options or the constraint types do not fit together.
        """
        self.method = create_method(self.parameters, self.constraints)
        self.method.compute_parameters()
        logger.info("Created %s for %r", type(self.method).__name__, self.constraints)
        self.greedy_result = None
        return None

    def solve(self) -> None:
        """
        Fit the weights, through the greedy reducer when
        ``use_greedy`` is set.

        A greedy run that exhausts its budget keeps the best-effort
        fit; the ReductionBudgetExceeded is available on
        ``greedy_result.error``.
        """
        if self.method is None:
            self.create()
        if self.parameters.use_greedy:
            self.greedy_result = GreedyReducer(self.method).run()
        else:
            self.method.setup_system_solver()
        return None

    def __call__(self, points):
        """
        Scalar field at an (n, 3) array of points.
        """
        return self._method().eval_scalar_interpolant(np.asarray(points, dtype=float))

    def gradient(self, points):
        """
        Vector field at an (n, 3) array of points.
        """
        return self._method().eval_vector_interpolant(np.asarray(points, dtype=float))

    def _method(self):
        if self.method is None:
            raise ModelNotSolvedError("Model has not been created. Call create() and solve() first.")
        return self.method
