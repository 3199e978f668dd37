import pytest
import numpy as np
from grbf.core.constraints import Constraints, Interface, Planar, Tangent, Inequality
from grbf.core.point import Point
from grbf.exceptions import AssemblyError


def test_from_arrays():
    """
    Test building a store from arrays of observations.
    """
    store = Constraints.from_arrays(interface=[[0, 0, 0, 1.0], [1, 0, 0, 2.0]],
                                    planar=[[0, 0, 1, 0, 0, 1, -1]],
                                    tangent=[[1, 1, 1, 1, 0, 0]],
                                    inequality=[[0, 1, 0, 0.5, -1]])
    assert store.count() == {'interface': 2, 'planar': 1, 'tangent': 1, 'inequality': 1}
    assert len(store) == 5
    assert np.allclose(store.interface_values(), [1.0, 2.0])
    assert np.allclose(store.planar_normals(), [[0, 0, -1]]), "Polarity -1 should reverse the normal."
    assert np.allclose(store.tangent_directions(), [[1, 0, 0]])
    assert np.allclose(store.inequality_directions(), [-1])
    assert [type(c) for c in store] == [Interface, Interface, Planar, Tangent, Inequality], (
        "Iteration should follow the block order."
    )


def test_version_tracks_mutation():
    """
    Test that every mutation increases the store version.
    """
    store = Constraints()
    assert store.version == 0
    constraint = store.add_interface(0, 0, 0, 0)
    store.add_planar(1, 0, 0, 0, 0, 1)
    assert store.version == 2
    store.remove(constraint)
    assert store.version == 3
    assert store.count()['interface'] == 0
    with pytest.raises(TypeError):
        store.append(Point(0, 0, 0))


def test_copy_is_shallow():
    """
    Test that a copy has its own lists but shares the constraint objects.
    """
    store = Constraints.from_arrays(interface=[[0, 0, 0, 1.0]])
    other = store.copy()
    other.add_interface(1, 1, 1, 2.0)
    assert len(store.interface) == 1, "Appending to the copy should not change the original."
    assert other.interface[0] is store.interface[0]


def test_empty_accessors():
    """
    Test array accessors of an empty store.
    """
    store = Constraints()
    assert store.planar_points().shape == (0, 3)
    assert store.tangent_directions().shape == (0, 3)
    assert store.interface_values().shape == (0,)


def test_check_coincident_points():
    """
    Test that two constraints of one type at the same position are rejected.
    """
    store = Constraints.from_arrays(interface=[[0, 0, 0, 0.0], [0, 0, 0, 1.0]])
    with pytest.raises(AssemblyError):
        store.check()
    # Different types may share a position.
    store = Constraints.from_arrays(interface=[[0, 0, 0, 0.0]], planar=[[0, 0, 0, 0, 0, 1]])
    store.check()


def test_check_zero_normal():
    """
    Test that zero-length normals and tangents are rejected.
    """
    store = Constraints.from_arrays(planar=[[0, 0, 0, 0, 0, 0]])
    with pytest.raises(AssemblyError):
        store.check()
    store = Constraints.from_arrays(tangent=[[0, 0, 0, 0, 0, 0]])
    with pytest.raises(AssemblyError):
        store.check(types=('tangent',))


def test_check_non_finite():
    """
    Test that non-finite coordinates and values are rejected.
    """
    store = Constraints.from_arrays(interface=[[np.nan, 0, 0, 0.0]])
    with pytest.raises(AssemblyError):
        store.check()
    store = Constraints.from_arrays(interface=[[0, 0, 0, np.inf]])
    with pytest.raises(AssemblyError):
        store.check()
    # Unchecked types are ignored.
    store.check(types=('planar',))


def test_fingerprint_tracks_edits():
    """
    Test that editing or replacing a constraint in place changes the fingerprint.
    """
    store = Constraints.from_arrays(interface=[[0, 0, 0, 0.0], [1, 0, 0, 1.0]],
                                    planar=[[0, 0, 1, 0, 0, 1]])
    before = store.fingerprint()
    assert store.copy().fingerprint() == before, "Equal content should give an equal fingerprint."
    store.interface[1] = Interface(1, 0, 0, 5.0)
    assert store.fingerprint() != before
    edited = store.fingerprint()
    store.planar[0].polarity = -1
    assert store.fingerprint() != edited, "Flipping a polarity should change the fingerprint."
