from .core.constraints import Constraints, Interface, Planar, Tangent, Inequality
from .core.point import Point
from .exceptions import (GRBFError, AssemblyError, SolverFailure, ConfigurationError,
                         ModelNotSolvedError, ReductionBudgetExceeded)
from .method import create_method, ModelingMethod, SingleSurface, VectorField
from .model import Model
from .parameters import ModelParameters
from .routines.greedy import GreedyReducer, GreedyResult

__version__ = "0.1.0"
