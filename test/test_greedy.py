import pytest
import numpy as np
from grbf.core.constraints import Constraints
from grbf.method.single_surface import SingleSurface
from grbf.method.vector_field import VectorField
from grbf.parameters import ModelParameters
from grbf.routines.greedy import GreedyReducer, minimal_input
from grbf.exceptions import ReductionBudgetExceeded, ConfigurationError


def _plane_data():
    """
    Dense observations of the field f(x, y, z) = z.
    """
    grid = np.array([[x, y] for x in np.linspace(0, 1, 4) for y in np.linspace(0, 1, 4)])
    bottom = np.hstack([grid, np.zeros((16, 1)), np.zeros((16, 1))])
    top = np.hstack([grid, np.ones((16, 1)), np.ones((16, 1))])
    planar = np.hstack([grid[:5] + 0.1, 0.5 * np.ones((5, 1)), np.tile([0, 0, 1], (5, 1))])
    return Constraints.from_arrays(interface=np.vstack([bottom, top]), planar=planar)


def _curved_data():
    """
    Level 0 on the curved surface z = x^2 / 2 and one level 1 point above it.
    """
    interface = [[x, y, 0.5 * x ** 2, 0.0] for x in (-1.0, 0.0, 1.0) for y in (-1.0, 0.0, 1.0)]
    interface.append([0.0, 0.0, 2.0, 1.0])
    return Constraints.from_arrays(interface=interface, planar=[[0.5, 0.5, 1.0, 0, 0, 1]])


def test_minimal_input_levels():
    """
    Test that the seed keeps the first interface constraint of every level.
    """
    constraints = Constraints.from_arrays(interface=[[0, 0, 0, 0], [1, 0, 0, 0], [0, 1, 0, 1],
                                                     [1, 1, 0, 1], [2, 2, 2, 0]])
    greedy_input, excluded = minimal_input(constraints)
    assert [c.level for c in greedy_input.interface] == [0.0, 1.0]
    assert greedy_input.interface[0] is constraints.interface[0]
    assert greedy_input.interface[1] is constraints.interface[2]
    assert len(greedy_input) + len(excluded) == len(constraints)
    assert len(constraints) == 5, "The full store should not be modified."


def test_minimal_input_planar_groups():
    """
    Test that one planar constraint is kept per spatial cluster.
    """
    planar = [[0, 0, 0, 0, 0, 1], [0.1, 0, 0, 0, 0, 1], [5, 5, 5, 0, 0, 1], [5.1, 5, 5, 0, 0, 1]]
    constraints = Constraints.from_arrays(planar=planar, tangent=[[1, 1, 1, 1, 0, 0]],
                                          inequality=[[2, 2, 2, 0.0]])
    greedy_input, excluded = minimal_input(constraints, group_radius=0.5)
    assert len(greedy_input.planar) == 2, f"Expected 2 planar seeds, got {len(greedy_input.planar)}"
    assert len(excluded.planar) == 2
    assert len(excluded.tangent) == 1 and len(excluded.inequality) == 1, (
        "Tangent and inequality constraints should start excluded."
    )
    greedy_input, _ = minimal_input(constraints)
    assert len(greedy_input.planar) == 1, "Without a radius all planar data form one cluster."
    greedy_input, excluded = minimal_input(constraints, types=('planar',))
    assert len(excluded.tangent) == 0, "Types outside the fit should be left out."


def test_minimal_input_padding():
    """
    Test that the seed is padded until its rows exceed the polynomial terms.
    """
    constraints = Constraints.from_arrays(interface=[[0, 0, 0, 0], [1, 0, 0, 0], [0, 1, 0, 0],
                                                     [0, 0, 1, 0], [0.1, 0.1, 0.1, 0]])
    greedy_input, excluded = minimal_input(constraints, min_rows=3)
    assert len(greedy_input.interface) == 4
    assert constraints.interface[4] in excluded.interface, "The point closest to the seed should be picked last."


def test_greedy_converges_on_seed():
    """
    Test that a linear field is recovered from the seed alone.
    """
    constraints = _plane_data()
    method = SingleSurface(ModelParameters(use_greedy=True), constraints)
    result = GreedyReducer(method).run()
    assert result.converged
    assert result.error is None
    assert result.iterations == 1
    assert result.residual <= 1.0
    assert len(result.active) < len(constraints)
    assert len(result.active) + len(result.excluded) == len(constraints)
    assert np.allclose(result.method.eval_scalar_interpolant(np.array([[0.5, 0.5, 0.3]])), [0.3], atol=1e-6)
    assert all(c.residual is not None for c in constraints), "Every constraint should carry a residual."


def test_greedy_adds_violators():
    """
    Test that the reduction grows the active subset until the tolerance is met.
    """
    constraints = _curved_data()
    method = SingleSurface(ModelParameters(use_greedy=True, greedy_batch_size=4), constraints)
    result = GreedyReducer(method).run()
    assert result.converged
    assert result.iterations > 1
    assert len(result.active) <= len(constraints)
    values = result.method.eval_scalar_interpolant(constraints.interface_points())
    assert np.allclose(values, constraints.interface_values(), atol=1e-3)


def test_greedy_budget_exceeded():
    """
    Test that an exhausted budget returns the best-effort fit with a soft error.
    """
    constraints = _curved_data()
    method = SingleSurface(ModelParameters(use_greedy=True, greedy_max_iterations=1, greedy_tolerance=1e-9),
                           constraints)
    result = GreedyReducer(method).run()
    assert not result.converged
    assert isinstance(result.error, ReductionBudgetExceeded)
    assert result.error.iterations == 1
    assert result.residual > 1.0
    assert result.method.is_solved, "The best-effort fit should stay usable."


def test_greedy_max_size():
    """
    Test that the active subset never grows beyond the size budget.
    """
    constraints = _curved_data()
    method = SingleSurface(ModelParameters(use_greedy=True, greedy_max_size=5, greedy_tolerance=1e-9),
                           constraints)
    result = GreedyReducer(method).run()
    assert len(result.active) <= 5
    assert isinstance(result.error, ReductionBudgetExceeded)


def test_greedy_vector_field():
    """
    Test the reduction of planar data of a constant vector field.
    """
    rng = np.random.default_rng(3)
    planar = np.hstack([rng.random((12, 3)) * 4.0, np.tile([0.0, 0.0, 1.0], (12, 1))])
    constraints = Constraints.from_arrays(planar=planar)
    parameters = ModelParameters(model_type="vector_field", kernel_type="gaussian", use_greedy=True,
                                 greedy_tolerance=1e-2, greedy_batch_size=3)
    result = GreedyReducer(VectorField(parameters, constraints)).run()
    assert len(result.active.planar) <= 12
    if result.converged:
        fitted = result.method.eval_vector_interpolant(constraints.planar_points())
        assert np.allclose(fitted, planar[:, 3:], atol=1e-2)


def test_greedy_configuration_error():
    """
    Test that configuration errors on the full store surface before any fit.
    """
    constraints = _plane_data()
    constraints.add_inequality(0.5, 0.5, 0.5, 0.8)
    with pytest.raises(ConfigurationError):
        GreedyReducer(SingleSurface(ModelParameters(use_greedy=True), constraints)).run()
