"""
Static rotation rules for the humanoid rig.

JOINT_RULE_TABLE maps joint -> action -> direction -> (axis, limit in degrees).
The axis sign encodes the handedness of the rotation for that direction.

JOINT_DISPLAY_NAMES maps internal joint names to the bone names used by the
motion file format (Japanese).
"""

Axis = tuple[float, float, float]
RuleEntry = tuple[Axis, float]
RuleTable = dict[str, dict[str, dict[str, RuleEntry]]]

_TORSO_BEND_AXES = {"forward": (-1.0, 0.0, 0.0), "backward": (1.0, 0.0, 0.0)}
_TORSO_TURN_AXES = {"left": (0.0, -1.0, 0.0), "right": (0.0, 1.0, 0.0)}
_TORSO_SWAY_AXES = {"left": (0.0, 0.0, -1.0), "right": (0.0, 0.0, 1.0)}


def _torso_joint(bend: tuple[float, float], turn: tuple[float, float], sway: tuple[float, float]) -> dict[str, dict[str, RuleEntry]]:
    """Joint on the spine axis. Each tuple holds the limits of (first, second) direction."""
    return {
        "bend": {
            "forward": (_TORSO_BEND_AXES["forward"], bend[0]),
            "backward": (_TORSO_BEND_AXES["backward"], bend[1]),
        },
        "turn": {
            "left": (_TORSO_TURN_AXES["left"], turn[0]),
            "right": (_TORSO_TURN_AXES["right"], turn[1]),
        },
        "sway": {
            "left": (_TORSO_SWAY_AXES["left"], sway[0]),
            "right": (_TORSO_SWAY_AXES["right"], sway[1]),
        },
    }


def _twist_joint() -> dict[str, dict[str, RuleEntry]]:
    return {
        "turn": {
            "left": ((0.0, -1.0, 0.0), 90.0),
            "right": ((0.0, 1.0, 0.0), 90.0),
        },
    }


def _finger_joint(bend_axis: Axis, sway_axis: Axis | None, sway_limit: float) -> dict[str, dict[str, RuleEntry]]:
    """Finger phalanx: `bend_axis` is the forward (curl) axis; sway is only present on base phalanges."""
    backward_axis = (-bend_axis[0], -bend_axis[1], -bend_axis[2])
    joint = {
        "bend": {
            "forward": (bend_axis, 90.0),
            "backward": (backward_axis, 15.0),
        },
    }
    if sway_axis is not None:
        opposite_sway_axis = (-sway_axis[0], -sway_axis[1], -sway_axis[2])
        joint["sway"] = {
            "left": (sway_axis, sway_limit),
            "right": (opposite_sway_axis, sway_limit),
        }
    return joint


JOINT_RULE_TABLE: RuleTable = {
    "base": _torso_joint(bend=(90.0, 90.0), turn=(180.0, 180.0), sway=(180.0, 180.0)),
    "center": _torso_joint(bend=(180.0, 180.0), turn=(180.0, 180.0), sway=(180.0, 180.0)),
    "head": _torso_joint(bend=(60.0, 90.0), turn=(90.0, 90.0), sway=(30.0, 30.0)),
    "neck": _torso_joint(bend=(45.0, 60.0), turn=(75.0, 75.0), sway=(30.0, 30.0)),
    "upper_body": _torso_joint(bend=(45.0, 45.0), turn=(45.0, 45.0), sway=(45.0, 45.0)),
    "upper_body2": _torso_joint(bend=(45.0, 45.0), turn=(45.0, 45.0), sway=(45.0, 45.0)),
    "lower_body": _torso_joint(bend=(45.0, 45.0), turn=(45.0, 45.0), sway=(45.0, 45.0)),
    "waist": _torso_joint(bend=(90.0, 90.0), turn=(45.0, 45.0), sway=(30.0, 30.0)),

    "shoulder_l": {
        "bend": {"forward": ((0.0, 0.0, -1.0), 90.0), "backward": ((0.0, 0.0, 1.0), 90.0)},
        "sway": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
    },
    "shoulder_r": {
        "bend": {"forward": ((0.0, 0.0, 1.0), 90.0), "backward": ((0.0, 0.0, -1.0), 90.0)},
        "sway": {"left": ((0.0, 1.0, 0.0), 90.0), "right": ((0.0, -1.0, 0.0), 90.0)},
    },
    "arm_l": {
        "bend": {"forward": ((0.0, 0.0, -1.0), 90.0), "backward": ((0.0, 0.0, 1.0), 90.0)},
        "sway": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
    },
    "arm_r": {
        "bend": {"forward": ((0.0, 0.0, 1.0), 45.0), "backward": ((0.0, 0.0, -1.0), 180.0)},
        "sway": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
    },
    "arm_twist_l": _twist_joint(),
    "arm_twist_r": _twist_joint(),
    "elbow_l": {
        "bend": {"forward": ((1.0, 1.0, 0.0), 135.0)},
    },
    "elbow_r": {
        "bend": {"forward": ((1.0, -1.0, 0.0), 135.0)},
    },
    "wrist_l": {
        "bend": {"forward": ((0.0, 0.0, -1.0), 60.0), "backward": ((1.0, 0.0, -1.0), 30.0)},
        "sway": {"left": ((-1.0, 1.0, 0.0), 15.0), "right": ((1.0, 1.0, 0.0), 15.0)},
    },
    "wrist_r": {
        "bend": {"forward": ((0.0, 0.0, 1.0), 60.0), "backward": ((-1.0, 0.0, -1.0), 30.0)},
        "sway": {"left": ((-1.0, -1.0, 0.0), 15.0), "right": ((1.0, -1.0, 0.0), 15.0)},
    },
    "wrist_twist_l": _twist_joint(),
    "wrist_twist_r": _twist_joint(),

    "leg_l": {
        "bend": {"forward": ((1.0, 0.0, 0.0), 90.0), "backward": ((-1.0, 0.0, 0.0), 90.0)},
        "turn": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
        "sway": {"left": ((0.0, 0.0, 1.0), 180.0), "right": ((0.0, 0.0, -1.0), 30.0)},
    },
    "leg_r": {
        "bend": {"forward": ((1.0, 0.0, 0.0), 90.0), "backward": ((-1.0, 0.0, 0.0), 90.0)},
        "turn": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
        "sway": {"left": ((0.0, 0.0, 1.0), 30.0), "right": ((0.0, 0.0, -1.0), 180.0)},
    },
    "knee_l": {
        "bend": {"backward": ((-1.0, 0.0, 0.0), 135.0)},
    },
    "knee_r": {
        "bend": {"backward": ((-1.0, 0.0, 0.0), 135.0)},
    },
    "ankle_l": {
        "bend": {"forward": ((-1.0, 0.0, 0.0), 60.0), "backward": ((1.0, 0.0, 0.0), 60.0)},
        "turn": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
        "sway": {"left": ((0.0, 0.0, 1.0), 30.0), "right": ((0.0, 0.0, -1.0), 30.0)},
    },
    "ankle_r": {
        "bend": {"forward": ((-1.0, 0.0, 0.0), 60.0), "backward": ((1.0, 0.0, 0.0), 60.0)},
        "turn": {"left": ((0.0, -1.0, 0.0), 90.0), "right": ((0.0, 1.0, 0.0), 90.0)},
        "sway": {"left": ((0.0, 0.0, 1.0), 30.0), "right": ((0.0, 0.0, -1.0), 30.0)},
    },
    "toe_l": {
        "bend": {"forward": ((-1.0, 0.0, 0.0), 30.0), "backward": ((1.0, 0.0, 0.0), 30.0)},
    },
    "toe_r": {
        "bend": {"forward": ((-1.0, 0.0, 0.0), 30.0), "backward": ((1.0, 0.0, 0.0), 30.0)},
    },

    # Left hand
    "thumb_0_l": _finger_joint(bend_axis=(-1.0, -1.0, 0.0), sway_axis=None, sway_limit=0.0),
    "thumb_1_l": _finger_joint(bend_axis=(-1.0, -1.0, 0.0), sway_axis=None, sway_limit=0.0),
    "thumb_2_l": _finger_joint(bend_axis=(-1.0, -1.0, 0.0), sway_axis=None, sway_limit=0.0),
    "index_0_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=(0.0, 0.0, 1.0), sway_limit=45.0),
    "index_1_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "index_2_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "middle_0_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=(0.0, 0.0, 1.0), sway_limit=45.0),
    "middle_1_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "middle_2_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "ring_0_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=(0.0, 0.0, 1.0), sway_limit=45.0),
    "ring_1_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "ring_2_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "pinky_0_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=(0.0, 0.0, 1.0), sway_limit=45.0),
    "pinky_1_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),
    "pinky_2_l": _finger_joint(bend_axis=(0.0, 0.0, -1.0), sway_axis=None, sway_limit=0.0),

    # Right hand
    "thumb_0_r": _finger_joint(bend_axis=(-1.0, 1.0, 0.0), sway_axis=(0.0, 0.0, 1.0), sway_limit=45.0),
    "thumb_1_r": _finger_joint(bend_axis=(-1.0, 1.0, 0.0), sway_axis=None, sway_limit=0.0),
    "thumb_2_r": _finger_joint(bend_axis=(-1.0, 1.0, 0.0), sway_axis=None, sway_limit=0.0),
    "index_0_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=(1.0, 0.0, 0.0), sway_limit=15.0),
    "index_1_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "index_2_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "middle_0_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=(1.0, 0.0, 0.0), sway_limit=45.0),
    "middle_1_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "middle_2_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "ring_0_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=(1.0, 0.0, 0.0), sway_limit=45.0),
    "ring_1_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "ring_2_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "pinky_0_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=(1.0, 0.0, 0.0), sway_limit=45.0),
    "pinky_1_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
    "pinky_2_r": _finger_joint(bend_axis=(0.0, 0.0, 1.0), sway_axis=None, sway_limit=0.0),
}

JOINT_DISPLAY_NAMES: dict[str, str] = {
    "base": "全ての親",
    "center": "センター",
    "upper_body": "上半身",
    "upper_body2": "上半身2",
    "lower_body": "下半身",
    "waist": "腰",
    "neck": "首",
    "head": "頭",
    "shoulder_l": "左肩",
    "shoulder_r": "右肩",
    "arm_l": "左腕",
    "arm_r": "右腕",
    "arm_twist_l": "左腕捩",
    "arm_twist_r": "右腕捩",
    "elbow_l": "左ひじ",
    "elbow_r": "右ひじ",
    "wrist_l": "左手首",
    "wrist_r": "右手首",
    "wrist_twist_l": "左手捩",
    "wrist_twist_r": "右手捩",
    "leg_l": "左足",
    "leg_r": "右足",
    "knee_l": "左ひざ",
    "knee_r": "右ひざ",
    "ankle_l": "左足首",
    "ankle_r": "右足首",
    "toe_l": "左足先EX",
    "toe_r": "右足先EX",
    "thumb_0_l": "左親指０",
    "thumb_1_l": "左親指１",
    "thumb_2_l": "左親指２",
    "index_0_l": "左人指１",
    "index_1_l": "左人指２",
    "index_2_l": "左人指３",
    "middle_0_l": "左中指０",
    "middle_1_l": "左中指２",
    "middle_2_l": "左中指３",
    "ring_0_l": "左薬指１",
    "ring_1_l": "左薬指２",
    "ring_2_l": "左薬指３",
    "pinky_0_l": "左小指１",
    "pinky_1_l": "左小指２",
    "pinky_2_l": "左小指３",
    "thumb_0_r": "右親指０",
    "thumb_1_r": "右親指１",
    "thumb_2_r": "右親指２",
    "index_0_r": "右人指１",
    "index_1_r": "右人指２",
    "index_2_r": "右人指３",
    "middle_0_r": "右中指１",
    "middle_1_r": "右中指２",
    "middle_2_r": "右中指３",
    "ring_0_r": "右薬指１",
    "ring_1_r": "右薬指２",
    "ring_2_r": "右薬指３",
    "pinky_0_r": "右小指１",
    "pinky_1_r": "右小指２",
    "pinky_2_r": "右小指３",
}
