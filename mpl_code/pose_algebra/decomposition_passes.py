"""
Individual passes of orientation -> statement decomposition.

Each pass is a standalone function with its own tolerance, so it can be tested on its own.
Passes 1-3 work on degree vectors with one entry per rule; passes 4-8 work on statements.
Rules are always visited in (action, direction) order, which is also the composition order.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import minimize

from mpl_code.joint_constraints.joint_constraint_database import JointConstraintDatabase
from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.kinematics_core.vector3_model import Vector3
from mpl_code.mpl_config import DecompositionConfig
from mpl_code.pose_algebra.pose_statement_model import PoseStatement

logger = logging.getLogger(__name__)

OPPOSING_DIRECTIONS: dict[str, str] = {
    "forward": "backward",
    "backward": "forward",
    "left": "right",
    "right": "left",
}
ANTIPARALLEL_DOT = -0.999


@dataclass(frozen=True)
class RuleAxis:
    """Flattened rule used inside the search loops."""

    action: str
    direction: str
    axis: Vector3
    """Unit axis"""
    limit: float

    @property
    def key(self) -> tuple[str, str]:
        return self.action, self.direction


def rule_axes_for_joint(joint: str, database: JointConstraintDatabase) -> list[RuleAxis]:
    return [
        RuleAxis(action=action, direction=direction, axis=rule.unit_axis, limit=rule.limit)
        for action, direction, rule in database.rules_for_joint(joint)
    ]


# =============================================================================
# COMPOSITION HELPERS
# =============================================================================


def compose_degrees(
    axes: list[RuleAxis],
    degrees: NDArray[np.float64],
    min_active_degrees: float,
) -> Quaternion:
    """Compose one rotation per rule, clamped to [0, limit]. Values <= min_active_degrees are skipped."""
    orientation = Quaternion.identity()
    for rule_axis, value in zip(axes, degrees):
        clamped = min(max(float(value), 0.0), rule_axis.limit)
        if clamped > min_active_degrees:
            orientation = orientation * Quaternion.from_axis_angle(axis=rule_axis.axis, degrees=clamped)
    return orientation


def degrees_error(
    target: Quaternion,
    axes: list[RuleAxis],
    degrees: NDArray[np.float64],
    min_active_degrees: float,
) -> float:
    return target.angular_distance(compose_degrees(axes, degrees, min_active_degrees))


def compose_rule_statements(statements: list[PoseStatement], rules: dict[tuple[str, str], RuleAxis]) -> Quaternion:
    orientation = Quaternion.identity()
    for statement in statements:
        rule_axis = rules[(statement.action, statement.direction)]
        orientation = orientation * Quaternion.from_axis_angle(axis=rule_axis.axis, degrees=statement.degrees)
    return orientation


def statements_error(
    target: Quaternion,
    statements: list[PoseStatement],
    rules: dict[tuple[str, str], RuleAxis],
) -> float:
    return target.angular_distance(compose_rule_statements(statements, rules))


def degrees_to_statements(
    joint: str,
    axes: list[RuleAxis],
    degrees: NDArray[np.float64],
    config: DecompositionConfig,
) -> list[PoseStatement]:
    statements = []
    for rule_axis, value in zip(axes, degrees):
        clamped = min(max(float(value), 0.0), rule_axis.limit)
        if clamped > config.min_active_degrees:
            statements.append(
                PoseStatement(
                    joint=joint,
                    action=rule_axis.action,
                    direction=rule_axis.direction,
                    degrees=round(clamped, config.statement_precision),
                )
            )
    return statements


def _canonical_order(statements: list[PoseStatement]) -> list[PoseStatement]:
    return sorted(statements, key=lambda s: (s.action, s.direction))


# =============================================================================
# PASS 1: EXACT SINGLE-AXIS SHORTCUT
# =============================================================================


def exact_axis_shortcut(
    joint: str,
    target: Quaternion,
    axes: list[RuleAxis],
    config: DecompositionConfig,
) -> list[PoseStatement] | None:
    """
    Single statement for a target that is a pure rotation about one rule's axis.

    The angle is clamped to [0, limit]. A clamped statement only survives the tolerance check
    when the overshoot is rounding noise, so targets past the limit fall through to the search.
    Returns None when no rule qualifies. The opposite direction of an action is reached
    through its own (sign-flipped) rule.
    """
    axis, angle_radians = target.canonical().to_axis_angle()
    if angle_radians <= 0.0:
        return None
    angle_degrees = math.degrees(angle_radians)
    rules = {rule_axis.key: rule_axis for rule_axis in axes}

    for rule_axis in axes:
        alignment = axis.dot(rule_axis.axis)
        if alignment <= config.exact_axis_alignment:
            continue
        statement = PoseStatement(
            joint=joint,
            action=rule_axis.action,
            direction=rule_axis.direction,
            degrees=round(min(angle_degrees, rule_axis.limit), config.statement_precision),
        )
        error = statements_error(target, [statement], rules)
        if error <= config.tolerance:
            logger.debug(f"{joint}: exact axis {rule_axis.key} at {statement.degrees} deg (alignment {alignment:.6f})")
            return [statement]
    return None


# =============================================================================
# PASS 2: GLOBAL SIMPLEX SEARCH
# =============================================================================


def seed_points(axes: list[RuleAxis], config: DecompositionConfig) -> list[NDArray[np.float64]]:
    """Deterministic starting points. A seed's fractions repeat across the axes (0.3, 0.7, 0.3, ...)."""
    limits = np.array([rule_axis.limit for rule_axis in axes], dtype=np.float64)
    seeds = []
    for fractions in config.seed_fractions:
        pattern = np.array([fractions[i % len(fractions)] for i in range(len(axes))], dtype=np.float64)
        seeds.append(pattern * limits)
    return seeds


def initial_simplex(x0: NDArray[np.float64], limits: NDArray[np.float64], step: float) -> NDArray[np.float64]:
    """(n + 1, n) simplex: x0, then x0 offset along each axis by step * limit."""
    n = x0.shape[0]
    simplex = np.tile(x0, (n + 1, 1))
    for i in range(n):
        simplex[i + 1, i] += limits[i] * step
    return simplex


def _run_simplex(
    objective,
    x0: NDArray[np.float64],
    limits: NDArray[np.float64],
    step: float,
    tolerance: float,
    max_iterations: int,
) -> tuple[NDArray[np.float64], float]:
    result = minimize(
        objective,
        x0,
        method="Nelder-Mead",
        options={
            "initial_simplex": initial_simplex(x0, limits, step),
            "maxiter": max_iterations,
            "fatol": tolerance,
            "xatol": np.inf,
        },
    )
    x = np.clip(result.x, 0.0, limits)
    return x, float(objective(x))


def global_simplex_search(
    target: Quaternion,
    axes: list[RuleAxis],
    config: DecompositionConfig,
) -> tuple[NDArray[np.float64], float]:
    """
    Minimize angular distance over one degree value per rule with Nelder-Mead from every seed.

    Returns the best (degrees, error). Ties go to the earlier seed.
    """
    limits = np.array([rule_axis.limit for rule_axis in axes], dtype=np.float64)

    def objective(x: NDArray[np.float64]) -> float:
        return degrees_error(target, axes, x, config.min_active_degrees)

    def run_seed(x0: NDArray[np.float64]) -> tuple[NDArray[np.float64], float]:
        return _run_simplex(
            objective,
            x0,
            limits,
            step=config.initial_simplex_step,
            tolerance=config.search_tolerance,
            max_iterations=config.search_max_iterations,
        )

    seeds = seed_points(axes, config)
    if config.parallel_seeds and len(seeds) > 1:
        with ThreadPoolExecutor(max_workers=len(seeds)) as executor:
            results = list(executor.map(run_seed, seeds))
    else:
        results = [run_seed(seed) for seed in seeds]

    best_degrees, best_error = results[0]
    for seed_index, (degrees, error) in enumerate(results):
        logger.debug(f"Seed {seed_index}: error {error:.3e}")
        if error < best_error:
            best_degrees, best_error = degrees, error
    return best_degrees, best_error


# =============================================================================
# PASS 3: SPARSIFICATION
# =============================================================================


def sparsify_degrees(
    target: Quaternion,
    axes: list[RuleAxis],
    degrees: NDArray[np.float64],
    config: DecompositionConfig,
) -> NDArray[np.float64]:
    """Zero each axis, smallest magnitude first, whenever the target is still met within tolerance."""
    degrees = np.array(degrees, dtype=np.float64)
    for index in np.argsort(np.abs(degrees), kind="stable"):
        if degrees[index] == 0.0:
            continue
        trial = degrees.copy()
        trial[index] = 0.0
        if degrees_error(target, axes, trial, config.min_active_degrees) <= config.tolerance:
            degrees = trial
    return degrees


# =============================================================================
# PASS 4: RE-OPTIMIZATION ON THE SURVIVING AXES
# =============================================================================


def refine_active_axes(
    target: Quaternion,
    axes: list[RuleAxis],
    degrees: NDArray[np.float64],
    config: DecompositionConfig,
) -> NDArray[np.float64]:
    """Tighter simplex search restricted to axes above min_active_degrees. Keeps the input if not improved."""
    degrees = np.array(degrees, dtype=np.float64)
    active = np.flatnonzero(degrees > config.min_active_degrees)
    if active.size == 0:
        return degrees

    active_axes = [axes[i] for i in active]
    limits = np.array([rule_axis.limit for rule_axis in active_axes], dtype=np.float64)

    def objective(x: NDArray[np.float64]) -> float:
        return degrees_error(target, active_axes, x, config.min_active_degrees)

    refined_active, refined_error = _run_simplex(
        objective,
        degrees[active],
        limits,
        step=config.refine_simplex_step,
        tolerance=config.refine_tolerance,
        max_iterations=config.refine_max_iterations,
    )
    if refined_error > degrees_error(target, axes, degrees, config.min_active_degrees):
        return degrees
    refined = degrees.copy()
    refined[active] = refined_active
    return refined


# =============================================================================
# PASS 5: OPPOSING-DIRECTION COLLAPSE
# =============================================================================


def collapse_opposing_directions(
    statements: list[PoseStatement],
    rules: dict[tuple[str, str], RuleAxis],
    config: DecompositionConfig,
) -> list[PoseStatement]:
    """
    Merge forward/backward or left/right of one action into a single statement at |d1 - d2|.

    Only pairs whose axes are antiparallel are merged; the larger side wins. A pair that
    cancels out entirely disappears.
    """
    by_key = {(s.action, s.direction): s for s in statements}
    collapsed: list[PoseStatement] = []
    consumed: set[tuple[str, str]] = set()

    for statement in statements:
        key = (statement.action, statement.direction)
        if key in consumed:
            continue
        opposite_direction = OPPOSING_DIRECTIONS.get(statement.direction)
        opposite_key = (statement.action, opposite_direction)
        opposite = by_key.get(opposite_key) if opposite_direction is not None else None
        if opposite is None or opposite_key in consumed:
            collapsed.append(statement)
            continue
        if rules[key].axis.dot(rules[opposite_key].axis) > ANTIPARALLEL_DOT:
            collapsed.append(statement)
            continue

        consumed.update({key, opposite_key})
        winner = statement if statement.degrees >= opposite.degrees else opposite
        difference = round(abs(statement.degrees - opposite.degrees), config.statement_precision)
        if difference > 0.0:
            collapsed.append(winner.model_copy(update={"degrees": difference}))

    return _canonical_order(collapsed)


# =============================================================================
# PASS 6: GREEDY PRUNING
# =============================================================================


def prune_statements(
    target: Quaternion,
    statements: list[PoseStatement],
    rules: dict[tuple[str, str], RuleAxis],
    config: DecompositionConfig,
) -> list[PoseStatement]:
    """Remove statements smallest-first while the target is still met; restart the scan after each removal."""
    statements = list(statements)
    removed = True
    while removed and statements:
        removed = False
        for candidate in sorted(statements, key=lambda s: s.degrees):
            trial = [s for s in statements if s is not candidate]
            if statements_error(target, trial, rules) <= config.tolerance:
                logger.debug(f"Pruned {candidate.to_text()}")
                statements = trial
                removed = True
                break
    return statements


# =============================================================================
# PASS 7: INVISIBLE STATEMENTS
# =============================================================================


def drop_invisible_statements(statements: list[PoseStatement], config: DecompositionConfig) -> list[PoseStatement]:
    return [s for s in statements if s.degrees >= config.visible_degrees]


# =============================================================================
# PASS 8: SNAP TO GRANULARITY
# =============================================================================


def snap_to_granularity(
    target: Quaternion,
    statements: list[PoseStatement],
    rules: dict[tuple[str, str], RuleAxis],
    config: DecompositionConfig,
) -> list[PoseStatement]:
    """Round every statement to the snap granularity if the snapped set still meets the target."""
    if not statements:
        return statements
    snapped = []
    for statement in statements:
        limit = rules[(statement.action, statement.direction)].limit
        value = round(round(statement.degrees / config.snap_granularity) * config.snap_granularity, config.statement_precision)
        snapped.append(statement.model_copy(update={"degrees": min(value, limit)}))
    if statements_error(target, snapped, rules) <= config.tolerance:
        return snapped
    return statements
