"""
Inverse decomposition: target orientation per joint -> minimal, legal statement list.

Pipeline per joint:
    1. exact single-axis shortcut
    2. global Nelder-Mead search from deterministic seeds
    3. sparsification
    4. re-optimization on the surviving axes
    5. opposing-direction collapse
    6. greedy pruning
    7. drop statements below the visible threshold
    8. snap to granularity
"""
import logging
from typing import Iterable

from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.mpl_config import DecompositionConfig
from mpl_code.pose_algebra.decomposition_passes import (
    collapse_opposing_directions,
    degrees_to_statements,
    drop_invisible_statements,
    exact_axis_shortcut,
    global_simplex_search,
    prune_statements,
    refine_active_axes,
    rule_axes_for_joint,
    snap_to_granularity,
    sparsify_degrees,
    statements_error,
)
from mpl_code.pose_algebra.joint_orientation_state_model import JointOrientationState
from mpl_code.pose_algebra.pose_model import Pose
from mpl_code.pose_algebra.pose_statement_model import PoseStatement

logger = logging.getLogger(__name__)


class JointDecomposer:
    """Runs the decomposition passes with one database and one config."""

    def __init__(
        self,
        database: JointConstraintDatabase | None = None,
        config: DecompositionConfig | None = None,
    ) -> None:
        self.database = database or get_joint_constraint_database()
        self.config = config or DecompositionConfig()

    def statements_from_orientation(self, joint: str, target: Quaternion) -> list[PoseStatement]:
        """
        Smallest statement list for `joint` whose composition matches `target`.

        Joints without rules give an empty list. Output is deterministic for a given input.
        """
        axes = rule_axes_for_joint(joint, self.database)
        if not axes:
            logger.debug(f"{joint}: no rules registered, nothing to decompose")
            return []
        if target.angular_distance(Quaternion.identity()) <= self.config.tolerance:
            return []

        shortcut = exact_axis_shortcut(joint, target, axes, self.config)
        if shortcut is not None:
            return shortcut

        rules = {rule_axis.key: rule_axis for rule_axis in axes}

        degrees, search_error = global_simplex_search(target, axes, self.config)
        logger.debug(f"{joint}: global search error {search_error:.3e}")

        degrees = sparsify_degrees(target, axes, degrees, self.config)
        degrees = refine_active_axes(target, axes, degrees, self.config)
        statements = degrees_to_statements(joint, axes, degrees, self.config)
        logger.debug(f"{joint}: {len(statements)} active axes after refinement")

        statements = collapse_opposing_directions(statements, rules, self.config)
        statements = prune_statements(target, statements, rules, self.config)
        statements = drop_invisible_statements(statements, self.config)
        statements = snap_to_granularity(target, statements, rules, self.config)

        final_error = statements_error(target, statements, rules)
        if final_error > self.config.tolerance:
            logger.debug(f"{joint}: best decomposition misses target by {final_error:.3e}")
        return statements

    def pose_from_orientations(self, name: str, states: Iterable[JointOrientationState]) -> Pose:
        """Decompose every state and gather the statements into one pose, in state order."""
        statements: list[PoseStatement] = []
        for state in states:
            joint = self._resolve_joint(state)
            if joint is None:
                logger.warning(f"Skipping unknown joint '{state.joint}' ({state.display_name})")
                continue
            statements.extend(self.statements_from_orientation(joint, state.orientation))
        pose = Pose(name=name, statements=tuple(statements))
        logger.info(f"Decomposed pose '{name}' into {len(statements)} statements")
        return pose

    def _resolve_joint(self, state: JointOrientationState) -> str | None:
        if self.database.has_joint(state.joint):
            return state.joint
        return self.database.internal_name(state.display_name)


def statements_from_orientation(
    joint: str,
    target: Quaternion,
    database: JointConstraintDatabase | None = None,
    config: DecompositionConfig | None = None,
) -> list[PoseStatement]:
    return JointDecomposer(database=database, config=config).statements_from_orientation(joint, target)


def pose_from_orientations(
    name: str,
    states: Iterable[JointOrientationState],
    database: JointConstraintDatabase | None = None,
    config: DecompositionConfig | None = None,
) -> Pose:
    return JointDecomposer(database=database, config=config).pose_from_orientations(name, states)
