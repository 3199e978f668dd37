import numpy as np
from .exceptions import ConfigurationError
from .kernel.profiles import KERNEL_TYPES

MODEL_TYPES = ("single_surface", "vector_field")
PROBLEM_TYPES = ("linear", "quadratic")
POLYNOMIAL_ORDERS = (0, 1, 2)


class ModelParameters:
    """
    Options controlling how a modeling method assembles and solves its system.

    Every option is a plain attribute with a default value. Keyword arguments
    given to the constructor override the defaults; unknown names raise a
    ConfigurationError.
    """
    def __init__(self, **kwargs):
        self.model_type = "single_surface"
        self.polynomial_order = 1
        self.use_polynomial = True
        self.kernel_type = "cubic"
        self.kernel_shape_params = (1.0,)
        self.problem_type = "linear"
        self.smoothing = 0.0
        self.use_greedy = False
        self.greedy_tolerance = 1.0e-3
        self.greedy_angular_tolerance = 5.0
        self.greedy_max_iterations = 50
        self.greedy_batch_size = 5
        self.greedy_max_size = None
        self.greedy_group_radius = None
        self.rcond_threshold = float(np.finfo(float).eps)
        self.n_threads = 1
        self.verbose = False
        self.update(**kwargs)

    def __str__(self):
        return str(vars(self))

    def __repr__(self):
        return "ModelParameters({})".format(
            ", ".join("{}={!r}".format(key, value) for key, value in vars(self).items()))

    def __eq__(self, other):
        if not isinstance(other, ModelParameters):
            return NotImplemented
        return vars(self) == vars(other)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    @classmethod
    def from_dict(cls, options):
        return cls(**dict(options))

    def update(self, **kwargs):
        """
        Override options in place.
        """
        for key, value in kwargs.items():
            if key not in vars(self):
                raise ConfigurationError("Unrecognized option '{}'.".format(key))
            if key == "kernel_shape_params":
                value = tuple(float(v) for v in np.atleast_1d(value))
            setattr(self, key, value)
        return self

    @property
    def shape_parameter(self):
        if len(self.kernel_shape_params) == 0:
            return 1.0
        return self.kernel_shape_params[0]

    def validate(self):
        """
        Check the options for unrecognized or contradictory values.

        Raises
        ------
        ConfigurationError
            If any option is out of range.
        """
        if self.model_type not in MODEL_TYPES:
            raise ConfigurationError("Unknown model type '{}'.".format(self.model_type),
                                     {"available": MODEL_TYPES})
        if self.kernel_type not in KERNEL_TYPES:
            raise ConfigurationError("Unknown kernel type '{}'.".format(self.kernel_type),
                                     {"available": tuple(KERNEL_TYPES)})
        if self.problem_type not in PROBLEM_TYPES:
            raise ConfigurationError("Unknown problem type '{}'.".format(self.problem_type),
                                     {"available": PROBLEM_TYPES})
        if self.use_polynomial and self.polynomial_order not in POLYNOMIAL_ORDERS:
            raise ConfigurationError("Polynomial order must be 0, 1 or 2.",
                                     {"polynomial_order": self.polynomial_order})
        if not all(np.isfinite(self.kernel_shape_params)) or self.shape_parameter <= 0:
            raise ConfigurationError("Kernel shape parameter must be positive.",
                                     {"kernel_shape_params": self.kernel_shape_params})
        if self.smoothing < 0:
            raise ConfigurationError("Smoothing must be non-negative.", {"smoothing": self.smoothing})
        if self.use_greedy:
            if self.greedy_tolerance <= 0 or self.greedy_angular_tolerance <= 0:
                raise ConfigurationError("Greedy tolerances must be positive.",
                                         {"greedy_tolerance": self.greedy_tolerance,
                                          "greedy_angular_tolerance": self.greedy_angular_tolerance})
            if self.greedy_max_iterations < 1 or self.greedy_batch_size < 1:
                raise ConfigurationError("Greedy iteration and batch budgets must be at least 1.")
            if self.greedy_max_size is not None and self.greedy_max_size < 1:
                raise ConfigurationError("Greedy size budget must be at least 1.")
        if self.n_threads < 1:
            raise ConfigurationError("Number of threads must be at least 1.", {"n_threads": self.n_threads})
        return None
