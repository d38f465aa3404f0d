"""
Joint constraint database: which rotations each joint of the rig allows.

Maps joint -> action -> direction -> ActionRule, with enumeration indexes and the
internal <-> display joint-name translation. Built once and never mutated.
"""
import logging
import threading
from types import MappingProxyType
from typing import Mapping

from mpl_code.joint_constraints.action_rule_model import ActionRule
from mpl_code.joint_constraints.joint_rule_table import JOINT_DISPLAY_NAMES, JOINT_RULE_TABLE, RuleTable
from mpl_code.mpl_errors import LimitExceededError, UnknownCombinationError

logger = logging.getLogger(__name__)


def _format_degrees(value: float) -> str:
    return f"{value:g}"


class JointConstraintDatabase:
    """
    Read-only lookup of rotation rules per joint.

    Queries for unknown joints/actions/directions return None rather than raising;
    only `validate` raises.
    """

    def __init__(
        self,
        rules: Mapping[str, Mapping[str, Mapping[str, ActionRule]]],
        translations: Mapping[str, str],
    ) -> None:
        self._rules = MappingProxyType({
            joint: MappingProxyType({
                action: MappingProxyType(dict(directions))
                for action, directions in actions.items()
            })
            for joint, actions in rules.items()
        })
        self._joints = tuple(self._rules.keys())
        self._actions = {joint: tuple(actions.keys()) for joint, actions in self._rules.items()}
        self._directions = {
            (joint, action): tuple(directions.keys())
            for joint, actions in self._rules.items()
            for action, directions in actions.items()
        }
        self._sorted_rules = {
            joint: tuple(
                (action, direction, actions[action][direction])
                for action in sorted(actions)
                for direction in sorted(actions[action])
            )
            for joint, actions in self._rules.items()
        }
        self._display_names = MappingProxyType(dict(translations))
        self._internal_names = MappingProxyType({display: internal for internal, display in translations.items()})

    @classmethod
    def from_table(cls, table: RuleTable, translations: Mapping[str, str] | None = None) -> "JointConstraintDatabase":
        """Build from plain `joint -> action -> direction -> (axis, limit)` data."""
        rules = {
            joint: {
                action: {
                    direction: ActionRule(axis=axis, limit=limit)
                    for direction, (axis, limit) in directions.items()
                }
                for action, directions in actions.items()
            }
            for joint, actions in table.items()
        }
        return cls(rules=rules, translations=translations or {})

    @classmethod
    def humanoid(cls) -> "JointConstraintDatabase":
        database = cls.from_table(JOINT_RULE_TABLE, JOINT_DISPLAY_NAMES)
        logger.debug(f"Built joint constraint database with {len(database.joints())} joints")
        return database

    # Enumeration

    def joints(self) -> tuple[str, ...]:
        return self._joints

    def has_joint(self, joint: str) -> bool:
        return joint in self._rules

    def actions(self, joint: str) -> tuple[str, ...] | None:
        return self._actions.get(joint)

    def directions(self, joint: str, action: str) -> tuple[str, ...] | None:
        return self._directions.get((joint, action))

    def rules_for_joint(self, joint: str) -> tuple[tuple[str, str, ActionRule], ...]:
        """(action, direction, rule) triples sorted by action then direction. Empty for unknown joints."""
        return self._sorted_rules.get(joint, ())

    # Rules

    def get_rule(self, joint: str, action: str, direction: str) -> ActionRule | None:
        actions = self._rules.get(joint)
        if actions is None:
            return None
        directions = actions.get(action)
        if directions is None:
            return None
        return directions.get(direction)

    def rules(self, joint: str, action: str, direction: str) -> ActionRule | None:
        return self.get_rule(joint, action, direction)

    def limit(self, joint: str, action: str, direction: str) -> float | None:
        rule = self.get_rule(joint, action, direction)
        return None if rule is None else rule.limit

    def validate(self, joint: str, action: str, direction: str, degrees: float) -> None:
        """
        Raise if the statement `joint action direction degrees` is not allowed.

        Raises:
            UnknownCombinationError: the triple is not in the database
            LimitExceededError: degrees is strictly greater than the rule limit
        """
        rule = self.get_rule(joint, action, direction)
        if rule is None:
            raise UnknownCombinationError(f"Invalid combination: {joint} {action} {direction}")
        if degrees > rule.limit:
            raise LimitExceededError(
                f"Max {_format_degrees(rule.limit)} degrees for {joint} {action} {direction}"
            )

    # Names

    def display_name(self, joint: str) -> str | None:
        return self._display_names.get(joint)

    def internal_name(self, display_name: str) -> str | None:
        return self._internal_names.get(display_name)

    def display_name_or_self(self, joint: str) -> str:
        return self._display_names.get(joint, joint)


_shared_database: JointConstraintDatabase | None = None
_shared_database_lock = threading.Lock()


def get_joint_constraint_database() -> JointConstraintDatabase:
    """Process-wide humanoid database, built on first use."""
    global _shared_database
    if _shared_database is None:
        with _shared_database_lock:
            if _shared_database is None:
                _shared_database = JointConstraintDatabase.humanoid()
    return _shared_database
