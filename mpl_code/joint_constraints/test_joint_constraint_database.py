"""
Tests for the joint constraint database.

Run with: python -m pytest mpl_code/joint_constraints
"""
import threading

import pytest

from mpl_code.joint_constraints.action_rule_model import ActionRule
from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.joint_constraints.joint_rule_table import JOINT_DISPLAY_NAMES, JOINT_RULE_TABLE
from mpl_code.kinematics_core.vector3_model import Vector3
from mpl_code.mpl_errors import LimitExceededError, UnknownCombinationError


# =============================================================================
# TEST FIXTURES
# =============================================================================


def create_test_database() -> JointConstraintDatabase:
    """Two-joint database with known, asymmetric limits."""
    return JointConstraintDatabase.from_table(
        table={
            "head": {
                "turn": {"right": ((0.0, 1.0, 0.0), 90.0), "left": ((0.0, -1.0, 0.0), 80.0)},
                "bend": {"forward": ((-1.0, 0.0, 0.0), 60.0)},
            },
            "tail": {
                "sway": {"left": ((0.0, 0.0, 1.0), 10.0)},
            },
        },
        translations={"head": "頭"},
    )


# =============================================================================
# ACTION RULE TESTS
# =============================================================================


def test_action_rule_accepts_tuple_axis() -> None:
    print("\n=== Test: ActionRule Axis Coercion ===")
    rule = ActionRule(axis=(1.0, 1.0, 0.0), limit=135.0)
    assert rule.axis == Vector3(x=1.0, y=1.0, z=0.0)
    assert rule.unit_axis.magnitude == pytest.approx(1.0)
    assert rule.unit_axis.x == pytest.approx(rule.unit_axis.y)
    print("  ✓ Tuple axis coerced and normalized on demand")


def test_action_rule_rejects_bad_values() -> None:
    print("\n=== Test: ActionRule Validation ===")
    with pytest.raises(ValueError):
        ActionRule(axis=(0.0, 0.0, 0.0), limit=10.0)
    with pytest.raises(ValueError):
        ActionRule(axis=(1.0, 0.0, 0.0), limit=-1.0)
    print("  ✓ Zero axis and negative limit rejected")


# =============================================================================
# LOOKUP TESTS
# =============================================================================


def test_enumeration() -> None:
    print("\n=== Test: Enumeration ===")
    database = create_test_database()
    assert database.joints() == ("head", "tail")
    assert set(database.actions("head")) == {"turn", "bend"}
    assert set(database.directions("head", "turn")) == {"left", "right"}
    assert database.actions("nope") is None
    assert database.directions("head", "sway") is None
    print("  ✓ Joints, actions and directions enumerate")


def test_rules_for_joint_sorted() -> None:
    print("\n=== Test: Sorted Rules ===")
    database = create_test_database()
    keys = [(action, direction) for action, direction, _ in database.rules_for_joint("head")]
    assert keys == [("bend", "forward"), ("turn", "left"), ("turn", "right")]
    assert database.rules_for_joint("nope") == ()
    print(f"  ✓ Sorted: {keys}")


def test_get_rule_and_limit() -> None:
    print("\n=== Test: Rule Lookup ===")
    database = create_test_database()
    rule = database.get_rule("head", "turn", "left")
    assert rule is not None
    assert rule.limit == 80.0
    assert database.rules("head", "turn", "left") == rule
    assert database.limit("head", "turn", "right") == 90.0
    assert database.get_rule("head", "turn", "up") is None
    assert database.limit("tail", "bend", "forward") is None
    print("  ✓ Rules and limits resolve, unknown triples give None")


# =============================================================================
# VALIDATION TESTS
# =============================================================================


def test_validate_at_limit_passes() -> None:
    print("\n=== Test: Validate At Limit ===")
    database = create_test_database()
    database.validate("head", "turn", "right", 90.0)
    database.validate("head", "turn", "right", 0.0)
    print("  ✓ Exactly at the limit is allowed")


def test_validate_over_limit_fails() -> None:
    print("\n=== Test: Validate Over Limit ===")
    database = create_test_database()
    with pytest.raises(LimitExceededError) as error_info:
        database.validate("head", "turn", "right", 90.0001)
    assert str(error_info.value) == "Max 90 degrees for head turn right"
    assert error_info.value.line is None
    print(f"  ✓ Rejected: {error_info.value}")


def test_validate_unknown_combination() -> None:
    print("\n=== Test: Validate Unknown Combination ===")
    database = create_test_database()
    for joint, action, direction in [("hed", "turn", "right"), ("head", "twirl", "right"), ("head", "bend", "backward")]:
        with pytest.raises(UnknownCombinationError) as error_info:
            database.validate(joint, action, direction, 1.0)
        assert str(error_info.value) == f"Invalid combination: {joint} {action} {direction}"
    print("  ✓ Unknown joint, action and direction all rejected")


def test_with_line_keeps_error_type() -> None:
    print("\n=== Test: Error Line Attachment ===")
    database = create_test_database()
    with pytest.raises(LimitExceededError) as error_info:
        database.validate("tail", "sway", "left", 11.0)
    pinned = error_info.value.with_line(7)
    assert isinstance(pinned, LimitExceededError)
    assert pinned.line == 7
    assert str(pinned) == "Line 7: Max 10 degrees for tail sway left"
    print(f"  ✓ {pinned}")


# =============================================================================
# NAME TRANSLATION TESTS
# =============================================================================


def test_name_translation() -> None:
    print("\n=== Test: Name Translation ===")
    database = create_test_database()
    assert database.display_name("head") == "頭"
    assert database.internal_name("頭") == "head"
    assert database.display_name("tail") is None
    assert database.internal_name("尻尾") is None
    assert database.display_name_or_self("tail") == "tail"
    print("  ✓ Both directions translate, unmapped joints fall back to themselves")


# =============================================================================
# HUMANOID TABLE TESTS
# =============================================================================


def test_humanoid_table_contents() -> None:
    print("\n=== Test: Humanoid Table ===")
    database = get_joint_constraint_database()
    assert len(database.joints()) == len(JOINT_RULE_TABLE)
    assert database.limit("head", "bend", "forward") == 60.0
    assert database.limit("elbow_l", "bend", "forward") == 135.0
    assert database.limit("knee_r", "bend", "forward") is None
    assert database.limit("leg_l", "sway", "left") == 180.0
    assert database.limit("index_0_r", "sway", "left") == 15.0
    assert database.actions("thumb_0_l") == ("bend",)
    assert database.display_name("middle_0_l") == "左中指０"
    print(f"  ✓ {len(database.joints())} joints loaded")


def test_humanoid_table_is_consistent() -> None:
    print("\n=== Test: Humanoid Table Consistency ===")
    database = get_joint_constraint_database()
    display_names = [database.display_name(joint) for joint in database.joints()]
    assert all(name is not None for name in display_names)
    assert len(set(display_names)) == len(display_names)
    assert set(JOINT_DISPLAY_NAMES) == set(database.joints())
    for joint in database.joints():
        for _, _, rule in database.rules_for_joint(joint):
            assert rule.unit_axis.magnitude == pytest.approx(1.0)
            assert rule.limit > 0.0
    print("  ✓ Every joint has a unique display name and valid rules")


def test_shared_database_built_once() -> None:
    print("\n=== Test: Shared Database Singleton ===")
    instances = []

    def fetch() -> None:
        instances.append(get_joint_constraint_database())

    threads = [threading.Thread(target=fetch) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert all(instance is instances[0] for instance in instances)
    print("  ✓ Concurrent first use returns one instance")


def run_all_tests() -> None:
    test_action_rule_accepts_tuple_axis()
    test_action_rule_rejects_bad_values()
    test_enumeration()
    test_rules_for_joint_sorted()
    test_get_rule_and_limit()
    test_validate_at_limit_passes()
    test_validate_over_limit_fails()
    test_validate_unknown_combination()
    test_with_line_keeps_error_type()
    test_name_translation()
    test_humanoid_table_contents()
    test_humanoid_table_is_consistent()
    test_shared_database_built_once()
    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
