"""
Expand a compiled Script's main sequence into absolute-time keyframes.

Each main entry starts where the previous one ended:
    - a pose contributes one keyframe and occupies DEFAULT_FRAME_DURATION seconds
    - an animation contributes one keyframe per frame and occupies its span

A timestamp animation's last frame sits at its span, which is also where the next entry
starts. When two keyframes land on the same instant the later one in main order wins.
"""
import logging

from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.language_compiler.animation_model import DEFAULT_FRAME_DURATION, Animation, AnimationFrame
from mpl_code.language_compiler.script_model import Script
from mpl_code.pose_algebra.pose_model import Pose
from mpl_code.timeline.keyframe_model import Keyframe

logger = logging.getLogger(__name__)

SAME_INSTANT_SECONDS = 1e-9


class TimelineResolver:
    def __init__(self, script: Script, database: JointConstraintDatabase | None = None) -> None:
        self.script = script
        self.database = database or get_joint_constraint_database()

    def resolve(self) -> list[Keyframe]:
        if not self.script.main:
            logger.warning("Script has no main sequence, nothing to resolve")
            return []

        keyframes: list[Keyframe] = []
        insertion_time = 0.0
        for reference in self.script.main:
            if self.script.is_pose(reference):
                keyframes.append(self._pose_keyframe(self.script.poses[reference], insertion_time))
                insertion_time += DEFAULT_FRAME_DURATION
            else:
                animation = self.script.animations[reference]
                keyframes.extend(self._animation_keyframes(animation, insertion_time))
                insertion_time += animation.span

        keyframes = drop_superseded_keyframes(keyframes)
        logger.info(
            f"Resolved {len(self.script.main)} main entries into {len(keyframes)} keyframes "
            f"spanning {insertion_time:.3f} s"
        )
        return keyframes

    def _pose_keyframe(self, pose: Pose, time: float) -> Keyframe:
        return Keyframe(time=time, joint_states=tuple(pose.to_orientations(self.database)))

    def _animation_keyframes(self, animation: Animation, offset: float) -> list[Keyframe]:
        timed_frames = sorted(
            zip(animation.frame_start_times(), animation.frames),
            key=lambda pair: pair[0],
        )
        return [self._frame_keyframe(frame, offset + start) for start, frame in timed_frames]

    def _frame_keyframe(self, frame: AnimationFrame, time: float) -> Keyframe:
        """Poses of one frame merge by concatenating their statements, so shared joints compose left to right."""
        statements = tuple(
            statement
            for pose_name in frame.pose_refs
            for statement in self.script.poses[pose_name].statements
        )
        merged = Pose(name=" & ".join(frame.pose_refs), statements=statements)
        return self._pose_keyframe(merged, time)


def drop_superseded_keyframes(keyframes: list[Keyframe]) -> list[Keyframe]:
    """Sort by time (stable) and keep only the last keyframe of each instant."""
    resolved: list[Keyframe] = []
    for keyframe in sorted(keyframes, key=lambda k: k.time):
        if resolved and abs(resolved[-1].time - keyframe.time) <= SAME_INSTANT_SECONDS:
            logger.debug(f"Keyframe at {keyframe.time:.3f} s replaces an earlier one at the same instant")
            resolved[-1] = keyframe
        else:
            resolved.append(keyframe)
    return resolved


def resolve_timeline(script: Script, database: JointConstraintDatabase | None = None) -> list[Keyframe]:
    return TimelineResolver(script, database).resolve()
