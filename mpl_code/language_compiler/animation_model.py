"""Animations: named sequences of timed frames that each reference one or more poses."""
import math
from enum import Enum

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

DEFAULT_FRAME_DURATION = 1.0


class AnimationDialect(str, Enum):
    """
    Grammar of animation statements. A document uses exactly one.

    DURATION:  `wave_up & smile 1.5s;`  (frame plays for 1.5 s, default 1 s)
    TIMESTAMP: `1.5: wave_up & smile;`  (frame sits at 1.5 s from the animation start)
    """

    DURATION = "duration"
    TIMESTAMP = "timestamp"


class AnimationFrame(BaseModel):
    """One timeline entry. `time_or_duration` is a span for DURATION frames and an offset for TIMESTAMP frames."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    timing: AnimationDialect
    time_or_duration: float
    pose_refs: tuple[str, ...]

    @field_validator("pose_refs")
    @classmethod
    def pose_refs_not_empty(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        if len(v) == 0:
            raise ValueError("Animation frame must reference at least one pose")
        return v

    @model_validator(mode="after")
    def validate_timing(self) -> "AnimationFrame":
        if not math.isfinite(self.time_or_duration):
            raise ValueError(f"Frame time must be finite, got {self.time_or_duration}")
        if self.timing == AnimationDialect.DURATION and self.time_or_duration <= 0.0:
            raise ValueError(f"Duration must be positive, got {self.time_or_duration}")
        if self.timing == AnimationDialect.TIMESTAMP and self.time_or_duration < 0.0:
            raise ValueError(f"Timestamp cannot be negative, got {self.time_or_duration}")
        return self

    @classmethod
    def with_duration(cls, pose_refs: tuple[str, ...], duration: float = DEFAULT_FRAME_DURATION) -> "AnimationFrame":
        return cls(timing=AnimationDialect.DURATION, time_or_duration=duration, pose_refs=pose_refs)

    @classmethod
    def at_time(cls, pose_refs: tuple[str, ...], time: float) -> "AnimationFrame":
        return cls(timing=AnimationDialect.TIMESTAMP, time_or_duration=time, pose_refs=pose_refs)


class Animation(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    frames: tuple[AnimationFrame, ...]

    @field_validator("frames")
    @classmethod
    def frames_not_empty(cls, v: tuple[AnimationFrame, ...]) -> tuple[AnimationFrame, ...]:
        if len(v) == 0:
            raise ValueError("Animation must contain at least one frame")
        return v

    @model_validator(mode="after")
    def single_dialect(self) -> "Animation":
        timings = {frame.timing for frame in self.frames}
        if len(timings) > 1:
            raise ValueError(f"Animation '{self.name}' mixes duration and timestamp frames")
        return self

    @property
    def dialect(self) -> AnimationDialect:
        return self.frames[0].timing

    @property
    def pose_refs(self) -> list[str]:
        """Every referenced pose name, in order of first appearance."""
        return list(dict.fromkeys(ref for frame in self.frames for ref in frame.pose_refs))

    def frame_start_times(self) -> list[float]:
        """Start of each frame relative to the animation's own zero."""
        if self.dialect == AnimationDialect.TIMESTAMP:
            return [frame.time_or_duration for frame in self.frames]
        starts = []
        elapsed = 0.0
        for frame in self.frames:
            starts.append(elapsed)
            elapsed += frame.time_or_duration
        return starts

    @property
    def span(self) -> float:
        """Sum of durations, or the latest timestamp."""
        if self.dialect == AnimationDialect.TIMESTAMP:
            return max(frame.time_or_duration for frame in self.frames)
        return sum(frame.time_or_duration for frame in self.frames)
