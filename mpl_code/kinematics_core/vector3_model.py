"""Immutable 3D vector used for rule axes and joint positions."""
import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float

    @classmethod
    def zero(cls) -> "Vector3":
        return cls(x=0.0, y=0.0, z=0.0)

    @classmethod
    def from_array(cls, values: NDArray[np.float64] | list[float] | tuple[float, ...]) -> "Vector3":
        values = np.asarray(values, dtype=np.float64)
        if values.shape != (3,):
            raise ValueError(f"Expected shape (3,), got {values.shape}")
        return cls(x=float(values[0]), y=float(values[1]), z=float(values[2]))

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> "Vector3":
        """Unit vector in the same direction. Zero-length vectors have no direction."""
        magnitude = self.magnitude
        if magnitude < 1e-12:
            raise ValueError("Cannot normalize zero-length vector")
        return Vector3(x=self.x / magnitude, y=self.y / magnitude, z=self.z / magnitude)

    def dot(self, other: "Vector3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def to_array(self) -> NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)
