"""One rotation statement: `<joint> <action> <direction> <degrees>`."""
from pydantic import BaseModel, ConfigDict, Field

from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.kinematics_core.quaternion_model import Quaternion


def format_degrees(value: float, precision: int = 3) -> str:
    """Degrees as typed by a person: `30`, `12.5`, `0.125`."""
    text = f"{round(value, precision):.{precision}f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


class PoseStatement(BaseModel):
    """
    A single joint rotation. Only constructed for triples the constraint database knows,
    with degrees within the rule limit (the compiler and the decomposer both check this).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    joint: str
    action: str
    direction: str
    degrees: float = Field(ge=0.0, allow_inf_nan=False)

    def to_orientation(self, database: JointConstraintDatabase | None = None) -> Quaternion:
        """Axis-angle quaternion for this statement. Unknown triples give the identity."""
        database = database or get_joint_constraint_database()
        rule = database.get_rule(self.joint, self.action, self.direction)
        if rule is None:
            return Quaternion.identity()
        return Quaternion.from_axis_angle(axis=rule.unit_axis, degrees=self.degrees)

    def to_text(self) -> str:
        return f"{self.joint} {self.action} {self.direction} {format_degrees(self.degrees)}"

    def __str__(self) -> str:
        return self.to_text()
