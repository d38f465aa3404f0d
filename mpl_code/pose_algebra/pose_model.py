"""Named poses and forward composition of statements into joint orientations."""
from typing import Iterable

from pydantic import BaseModel, ConfigDict, field_validator

from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.pose_algebra.joint_orientation_state_model import JointOrientationState
from mpl_code.pose_algebra.pose_statement_model import PoseStatement


def compose_statements(
    statements: Iterable[PoseStatement],
    database: JointConstraintDatabase | None = None,
) -> Quaternion:
    """
    Fold statements left to right by quaternion multiplication, starting at the identity.

    Composition is not commutative: `[A, B]` gives `A * B`.
    """
    database = database or get_joint_constraint_database()
    orientation = Quaternion.identity()
    for statement in statements:
        orientation = orientation * statement.to_orientation(database)
    return orientation


def group_statements_by_joint(statements: Iterable[PoseStatement]) -> dict[str, list[PoseStatement]]:
    grouped: dict[str, list[PoseStatement]] = {}
    for statement in statements:
        grouped.setdefault(statement.joint, []).append(statement)
    return grouped


class Pose(BaseModel):
    """A named, ordered set of statements. Several statements may target the same joint."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    statements: tuple[PoseStatement, ...] = ()

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Pose name cannot be empty")
        return v

    @property
    def joints(self) -> list[str]:
        return list(group_statements_by_joint(self.statements).keys())

    def to_orientations(self, database: JointConstraintDatabase | None = None) -> list[JointOrientationState]:
        """One state per distinct joint, each the ordered composition of that joint's statements."""
        database = database or get_joint_constraint_database()
        return [
            JointOrientationState(
                joint=joint,
                display_name=database.display_name_or_self(joint),
                orientation=compose_statements(joint_statements, database),
            )
            for joint, joint_statements in group_statements_by_joint(self.statements).items()
        ]

    def to_text(self) -> str:
        """Render as an `@pose` block that compiles back to this pose."""
        lines = [f"@pose {self.name} {{"]
        lines.extend(f"    {statement.to_text()};" for statement in self.statements)
        lines.append("}")
        return "\n".join(lines)
