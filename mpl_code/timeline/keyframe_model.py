import math

from pydantic import BaseModel, ConfigDict, field_validator

from mpl_code.pose_algebra.joint_orientation_state_model import JointOrientationState


class MorphWeight(BaseModel):
    """Facial morph value at a keyframe. Carried through to the motion file untouched."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    display_name: str
    weight: float


class Keyframe(BaseModel):
    """One resolved instant: an orientation per joint plus optional morph weights."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    time: float
    """Seconds from the start of the main sequence"""

    joint_states: tuple[JointOrientationState, ...] = ()
    morph_weights: tuple[MorphWeight, ...] = ()

    @field_validator("time")
    @classmethod
    def time_is_finite(cls, v: float) -> float:
        if not math.isfinite(v):
            raise ValueError(f"Keyframe time must be finite, got {v}")
        return v

    @property
    def joints(self) -> list[str]:
        return [state.joint for state in self.joint_states]
