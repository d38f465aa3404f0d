from types import MappingProxyType
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator

from mpl_code.language_compiler.animation_model import Animation, AnimationDialect
from mpl_code.pose_algebra.pose_model import Pose


class Script(BaseModel):
    """
    Result of one compile call: poses, animations and the main sequence.

    Poses and animations share one namespace; the main sequence references either.
    Both name tables are read-only views once the Script is built.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    poses: Mapping[str, Pose] = {}
    animations: Mapping[str, Animation] = {}
    main: tuple[str, ...] = ()
    dialect: AnimationDialect = AnimationDialect.DURATION

    @model_validator(mode="after")
    def validate_names(self) -> "Script":
        shared = set(self.poses) & set(self.animations)
        if shared:
            raise ValueError(f"Names used for both a pose and an animation: {sorted(shared)}")
        for reference in self.main:
            if reference not in self.poses and reference not in self.animations:
                raise ValueError(f"Main references unknown animation or pose '{reference}'")
        for animation in self.animations.values():
            for pose_name in animation.pose_refs:
                if pose_name not in self.poses:
                    raise ValueError(f"Animation '{animation.name}' references unknown pose '{pose_name}'")
        return self

    @model_validator(mode="after")
    def freeze_name_tables(self) -> "Script":
        object.__setattr__(self, "poses", MappingProxyType(dict(self.poses)))
        object.__setattr__(self, "animations", MappingProxyType(dict(self.animations)))
        return self

    @field_serializer("poses", "animations")
    def serialize_name_table(self, table: Mapping[str, Any]) -> dict[str, Any]:
        return dict(table)

    def is_pose(self, name: str) -> bool:
        return name in self.poses

    def is_animation(self, name: str) -> bool:
        return name in self.animations
