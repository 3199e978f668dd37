from .base import ModelingMethod, InternalParameters
from .vector_field import VectorField
from .single_surface import SingleSurface
from ..exceptions import ConfigurationError
from ..parameters import ModelParameters

METHODS = {
    VectorField.model_type: VectorField,
    SingleSurface.model_type: SingleSurface,
}


def create_method(parameters=None, constraints=None, **kwargs):
    """
    Build the modeling method selected by ``parameters.model_type``.

    Parameters
    ----------
    parameters : ModelParameters, optional
        Configuration of the fit. Keyword arguments override its options.
    constraints : Constraints, optional
        Data to fit.

    Returns
    -------
    ModelingMethod

    Raises
    ------
    ConfigurationError
        If the options are unrecognized or out of range.
    """
    if parameters is None:
        parameters = ModelParameters(**kwargs)
    elif kwargs:
        parameters.update(**kwargs)
    parameters.validate()
    method_class = METHODS.get(parameters.model_type)
    if method_class is None:
        raise ConfigurationError("Unknown model type '{}'.".format(parameters.model_type),
                                 {"available": tuple(METHODS)})
    return method_class(parameters=parameters, constraints=constraints)
