"""
Tests for the vector and quaternion primitives.

Run with: python -m pytest mpl_code/kinematics_core
"""
import math

import numpy as np
import pytest

from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.kinematics_core.vector3_model import Vector3


# =============================================================================
# VECTOR TESTS
# =============================================================================


def test_vector_normalize() -> None:
    print("\n=== Test: Vector Normalize ===")
    v = Vector3(x=3.0, y=0.0, z=4.0)
    assert v.magnitude == pytest.approx(5.0)
    unit = v.normalize()
    assert unit.magnitude == pytest.approx(1.0)
    assert unit.dot(Vector3(x=0.0, y=0.0, z=1.0)) == pytest.approx(0.8)
    print("  ✓ Normalized")

    with pytest.raises(ValueError):
        Vector3.zero().normalize()


def test_vector_from_array_shape() -> None:
    assert Vector3.from_array([1, 2, 3]) == Vector3(x=1.0, y=2.0, z=3.0)
    with pytest.raises(ValueError):
        Vector3.from_array([1.0, 2.0])


# =============================================================================
# QUATERNION TESTS
# =============================================================================


def test_quaternion_is_normalized() -> None:
    q = Quaternion(x=0.0, y=0.0, z=0.0, w=2.0)
    assert q == Quaternion.identity()
    with pytest.raises(ValueError):
        Quaternion(x=0.0, y=0.0, z=0.0, w=0.0)


def test_quaternion_from_array() -> None:
    q = Quaternion.from_array([0.0, 3.0, 0.0, 4.0])
    np.testing.assert_allclose(q.to_array(), [0.0, 0.6, 0.0, 0.8])
    with pytest.raises(ValueError):
        Quaternion.from_array([0.0, 0.0, 1.0])


def test_axis_angle_roundtrip() -> None:
    print("\n=== Test: Axis-Angle ===")
    q = Quaternion.from_axis_angle(Vector3(x=0.0, y=2.0, z=0.0), 90.0)
    axis, angle = q.to_axis_angle()
    assert math.degrees(angle) == pytest.approx(90.0)
    assert axis.dot(Vector3(x=0.0, y=1.0, z=0.0)) == pytest.approx(1.0)

    rotated = q.rotate_vector(np.array([1.0, 0.0, 0.0]))
    np.testing.assert_allclose(rotated, [0.0, 0.0, -1.0], atol=1e-12)
    print("  ✓ 90 degrees about Y maps X to -Z")


def test_tiny_angle_is_identity() -> None:
    q = Quaternion.from_axis_angle(Vector3(x=1.0, y=0.0, z=0.0), 1e-6)
    assert q.is_identity()
    axis, angle = Quaternion.identity().to_axis_angle()
    assert angle == 0.0
    assert axis == Vector3(x=1.0, y=0.0, z=0.0)


def test_multiply_order() -> None:
    """self * other applies other first, in the frame rotated by self."""
    about_x = Quaternion.from_axis_angle(Vector3(x=1.0, y=0.0, z=0.0), 90.0)
    about_y = Quaternion.from_axis_angle(Vector3(x=0.0, y=1.0, z=0.0), 90.0)
    v = np.array([0.0, 0.0, 1.0])

    combined = (about_x * about_y).rotate_vector(v)
    sequential = about_x.rotate_vector(about_y.rotate_vector(v))
    np.testing.assert_allclose(combined, sequential, atol=1e-12)
    assert (about_x * about_y).angular_distance(about_y * about_x) > 0.1


def test_sign_does_not_matter() -> None:
    q = Quaternion.from_axis_angle(Vector3(x=0.0, y=0.0, z=1.0), 200.0)
    flipped = Quaternion(x=-q.x, y=-q.y, z=-q.z, w=-q.w)
    assert q.angular_distance(flipped) == pytest.approx(0.0)
    assert q.canonical().w >= 0.0
    assert (q.inverse() * q).is_identity()


def run_all_tests() -> None:
    test_vector_normalize()
    test_vector_from_array_shape()
    test_quaternion_is_normalized()
    test_quaternion_from_array()
    test_axis_angle_roundtrip()
    test_tiny_angle_is_identity()
    test_multiply_order()
    test_sign_does_not_matter()
    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
