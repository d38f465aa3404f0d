from pydantic import BaseModel, ConfigDict

from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.kinematics_core.vector3_model import Vector3


class JointOrientationState(BaseModel):
    """Resolved rotation of one joint. Poses are rotation-only, so position stays at zero."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        arbitrary_types_allowed=True,
    )

    joint: str
    """Internal joint name, e.g. `head`"""

    display_name: str
    """Bone name written to motion files, e.g. `頭`"""

    orientation: Quaternion
    position: Vector3 = Vector3.zero()
