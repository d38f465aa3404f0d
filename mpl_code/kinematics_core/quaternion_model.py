"""Unit quaternion class for joint rotations."""
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from mpl_code.kinematics_core.vector3_model import Vector3

# Below this many degrees an axis-angle rotation is treated as no rotation at all
AXIS_ANGLE_EPSILON_DEGREES = 1e-4


@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion for rotations. Convention: vector-first [x, y, z, w], identity = (0, 0, 0, 1)."""

    x: float
    y: float
    z: float
    w: float

    def __post_init__(self) -> None:
        norm = math.sqrt(self.x**2 + self.y**2 + self.z**2 + self.w**2)
        if norm < 1e-10:
            raise ValueError("Cannot normalize zero quaternion")
        object.__setattr__(self, "x", float(self.x / norm))
        object.__setattr__(self, "y", float(self.y / norm))
        object.__setattr__(self, "z", float(self.z / norm))
        object.__setattr__(self, "w", float(self.w / norm))

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(x=0.0, y=0.0, z=0.0, w=1.0)

    @classmethod
    def from_axis_angle(cls, axis: Vector3, degrees: float) -> "Quaternion":
        """
        Rotation of `degrees` around `axis` (right-handed).

        The axis does not need to be unit length; it is normalized here.
        """
        if abs(degrees) < AXIS_ANGLE_EPSILON_DEGREES:
            return cls.identity()
        unit_axis = axis.normalize()
        half_angle = math.radians(degrees) / 2.0
        sin_half = math.sin(half_angle)
        return cls(
            x=unit_axis.x * sin_half,
            y=unit_axis.y * sin_half,
            z=unit_axis.z * sin_half,
            w=math.cos(half_angle),
        )

    @classmethod
    def from_array(cls, values: NDArray[np.float64] | list[float] | tuple[float, ...]) -> "Quaternion":
        """Build from an (x, y, z, w) sequence."""
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (4,):
            raise ValueError(f"Expected shape (4,), got {values.shape}")
        return cls(x=values[0], y=values[1], z=values[2], w=values[3])

    def conjugate(self) -> "Quaternion":
        return Quaternion(x=-self.x, y=-self.y, z=-self.z, w=self.w)

    def inverse(self) -> "Quaternion":
        return self.conjugate()

    def multiply(self, other: "Quaternion") -> "Quaternion":
        """
        Hamilton product self * other. The result applies `other` in the frame rotated by `self`.
        :param other:
        :return:
        """
        x1, y1, z1, w1 = self.x, self.y, self.z, self.w
        x2, y2, z2, w2 = other.x, other.y, other.z, other.w
        return Quaternion(
            x=w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            y=w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            z=w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w=w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        )

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        return self.multiply(other)

    def dot(self, other: "Quaternion") -> float:
        """Compute dot product of two quaternions."""
        return self.x * other.x + self.y * other.y + self.z * other.z + self.w * other.w

    def similarity(self, other: "Quaternion") -> float:
        # q and -q represent the same rotation
        return abs(self.dot(other))

    def angular_distance(self, other: "Quaternion") -> float:
        """1 - |q1·q2|, in [0, 1]. Zero means the same rotation."""
        return max(0.0, 1.0 - self.similarity(other))

    def canonical(self) -> "Quaternion":
        """Same rotation with a non-negative scalar part."""
        if self.w < 0.0:
            return Quaternion(x=-self.x, y=-self.y, z=-self.z, w=-self.w)
        return self

    def is_identity(self, tolerance: float = 1e-12) -> bool:
        return self.angular_distance(Quaternion.identity()) <= tolerance

    def to_axis_angle(self) -> tuple[Vector3, float]:
        """
        Returns (unit axis, angle in radians) with the angle in [0, pi].

        The identity rotation reports the X axis and a zero angle.
        """
        canonical = self.canonical()
        w_clamped = min(1.0, max(-1.0, canonical.w))
        angle = 2.0 * math.acos(w_clamped)
        sin_half = math.sqrt(max(0.0, 1.0 - w_clamped**2))
        if sin_half < 1e-10:
            return Vector3(x=1.0, y=0.0, z=0.0), 0.0
        axis = Vector3(x=canonical.x / sin_half, y=canonical.y / sin_half, z=canonical.z / sin_half)
        return axis.normalize(), angle

    def rotate_vector(self, v: NDArray[np.float64]) -> NDArray[np.float64]:
        v = np.asarray(v, dtype=np.float64)
        u = np.array([self.x, self.y, self.z])
        uv = np.cross(u, v)
        uuv = np.cross(u, uv)
        return v + 2.0 * (self.w * uv + uuv)

    def to_array(self) -> NDArray[np.float64]:
        """(4,) array as [x, y, z, w]."""
        return np.array([self.x, self.y, self.z, self.w], dtype=np.float64)
