"""A single (joint, action, direction) rotation rule."""
from functools import cached_property

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mpl_code.kinematics_core.vector3_model import Vector3


class ActionRule(BaseModel):
    """
    Rotation axis and degree limit for one direction of one action on one joint.

    The sign of the axis encodes the handedness of the rotation for this direction,
    so `bend forward` and `bend backward` usually carry opposite axes.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    axis: Vector3
    """Rotation axis in the joint's local frame, not necessarily unit length"""

    limit: float = Field(ge=0.0)
    """Largest rotation, in degrees, this direction allows"""

    @field_validator("axis", mode="before")
    @classmethod
    def coerce_axis(cls, v: Vector3 | tuple[float, float, float] | list[float]) -> Vector3:
        if isinstance(v, Vector3):
            return v
        return Vector3.from_array(v)

    @field_validator("axis")
    @classmethod
    def axis_not_zero(cls, v: Vector3) -> Vector3:
        if v.magnitude < 1e-12:
            raise ValueError("Rule axis cannot be zero-length")
        return v

    @cached_property
    def unit_axis(self) -> Vector3:
        return self.axis.normalize()
