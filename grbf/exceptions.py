"""
Exception classes raised by the modeling engine.

Assembly and solve failures are terminal for the run that produced them: a
modeling method that raised one of these keeps no usable weight vector and
must be set up again from corrected input.
"""
from __future__ import annotations

from typing import Any


class GRBFError(Exception):
    """
    Base exception for the modeling engine.

    Parameters
    ----------
    message : str
        Description of the failure.
    diagnostic_data : dict, optional
        Extra values (sizes, indices, condition numbers) appended to the
        message to help locate the offending input.
    """

    def __init__(self, message: str, diagnostic_data: dict[str, Any] | None = None):
        self.diagnostic_data = diagnostic_data or {}
        full_message = message
        if self.diagnostic_data:
            details = ", ".join("{}={}".format(key, value) for key, value in self.diagnostic_data.items())
            full_message += " ({})".format(details)
        super().__init__(full_message)


class AssemblyError(GRBFError):
    """A matrix or vector block of the interpolation system could not be computed."""


class SolverFailure(GRBFError):
    """The system is singular, ill-conditioned, or the inequality problem is infeasible."""


class ConfigurationError(GRBFError):
    """Constraint types or options are incompatible with the declared problem."""


class ModelNotSolvedError(GRBFError):
    """Evaluation was requested on a method without a valid weight vector."""


class ReductionBudgetExceeded(GRBFError):
    """
    The greedy reduction did not meet its tolerance within budget.

    This is a soft failure. It is returned with the best-effort fit instead
    of being raised.

    Parameters
    ----------
    message : str
        Description of the exhausted budget.
    residual : float
        Largest normalised residual reached by the best-effort fit.
    iterations : int
        Number of greedy iterations performed.
    """

    def __init__(self, message: str, residual: float, iterations: int):
        self.residual = residual
        self.iterations = iterations
        super().__init__(message, {"residual": residual, "iterations": iterations})
