"""Parsers for single statements inside pose, animation and main blocks. Errors carry no line number."""
import logging
import math

from mpl_code.joint_constraints.joint_constraint_database import JointConstraintDatabase
from mpl_code.language_compiler.animation_model import DEFAULT_FRAME_DURATION, AnimationFrame
from mpl_code.mpl_errors import ParseError
from mpl_code.pose_algebra.pose_statement_model import PoseStatement

logger = logging.getLogger(__name__)

POSE_COMBINATION_SEPARATOR = "&"
DURATION_SUFFIX = "s"


def _split_pose_refs(text: str) -> tuple[str, ...]:
    refs = tuple(part.strip() for part in text.split(POSE_COMBINATION_SEPARATOR) if part.strip())
    if not refs:
        raise ParseError("Animation statement must contain at least one pose")
    return refs


def parse_pose_statement(text: str, database: JointConstraintDatabase) -> PoseStatement:
    """`<joint> <action> <direction> <degrees>`, checked against the database."""
    parts = text.split()
    if not parts:
        raise ParseError("Empty statement")
    if len(parts) != 4:
        raise ParseError(f"Invalid statement '{text}': expected '<joint> <action> <direction> <degrees>'")
    joint, action, direction, degrees_text = parts
    try:
        degrees = float(degrees_text)
    except ValueError:
        raise ParseError(f"Invalid degrees number '{degrees_text}'")
    if not math.isfinite(degrees) or degrees < 0.0:
        raise ParseError(f"Degrees must be a finite, non-negative number, got '{degrees_text}'")

    database.validate(joint, action, direction, degrees)
    return PoseStatement(joint=joint, action=action, direction=direction, degrees=degrees)


def parse_duration_frame(text: str) -> AnimationFrame:
    """
    `pose1 & pose2 1.5s` or `pose1 & pose2` (1 s).

    A last token ending in `s` that is not a number is treated as part of the pose list,
    so the frame falls back to the default duration.
    """
    text = text.strip()
    poses_text, duration = text, DEFAULT_FRAME_DURATION
    head, separator, last_token = text.rpartition(" ")
    if separator and last_token.endswith(DURATION_SUFFIX):
        try:
            parsed = float(last_token[: -len(DURATION_SUFFIX)])
        except ValueError:
            logger.debug(f"Unparsable duration '{last_token}', using default {DEFAULT_FRAME_DURATION}s")
        else:
            if not math.isfinite(parsed) or parsed <= 0.0:
                raise ParseError(f"Duration must be positive, got '{last_token}'")
            poses_text, duration = head, parsed

    return AnimationFrame.with_duration(pose_refs=_split_pose_refs(poses_text), duration=duration)


def parse_timestamp_frame(text: str) -> AnimationFrame:
    """`1.5: pose1 & pose2`. The time may carry an `s` suffix."""
    time_text, separator, poses_text = text.partition(":")
    if not separator:
        raise ParseError(f"Missing ':' after time in '{text.strip()}'")
    time_text = time_text.strip()
    if time_text.endswith(DURATION_SUFFIX):
        time_text = time_text[: -len(DURATION_SUFFIX)]
    try:
        time = float(time_text)
    except ValueError:
        raise ParseError(f"Invalid time '{time_text}'")
    if not math.isfinite(time):
        raise ParseError(f"Invalid time '{time_text}'")
    if time < 0.0:
        raise ParseError(f"Time cannot be negative, got {time_text}")

    return AnimationFrame.at_time(pose_refs=_split_pose_refs(poses_text), time=time)


def parse_main_reference(text: str) -> str:
    parts = text.split()
    if len(parts) != 1:
        raise ParseError(f"Main entry must be a single pose or animation name, got '{text.strip()}'")
    return parts[0]
