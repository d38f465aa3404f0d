"""
Tidy-format export of resolved keyframes.

One row per (keyframe, joint, component) observation, matching the layout used for
kinematics CSVs so the same plotting and analysis tools read both.
"""
import logging
from pathlib import Path

import numpy as np
import polars as pl

from mpl_code.timeline.keyframe_model import Keyframe

logger = logging.getLogger(__name__)

ORIENTATION_COMPONENTS = ["x", "y", "z", "w"]
POSITION_COMPONENTS = ["x", "y", "z"]


def _build_joint_chunk(
    keyframe_index: int,
    keyframe: Keyframe,
    trajectory_name: str,
    component_names: list[str],
    values: np.ndarray,
    units: str,
) -> pl.DataFrame:
    """values: (n_joints, n_components) for one keyframe."""
    number_of_joints = len(keyframe.joint_states)
    number_of_components = len(component_names)
    return pl.DataFrame({
        "keyframe": np.full(number_of_joints * number_of_components, keyframe_index, dtype=np.int64),
        "timestamp_s": np.full(number_of_joints * number_of_components, keyframe.time, dtype=np.float64),
        "joint": np.repeat([state.joint for state in keyframe.joint_states], number_of_components),
        "display_name": np.repeat([state.display_name for state in keyframe.joint_states], number_of_components),
        "component": np.tile(component_names, number_of_joints),
        "value": values.ravel(),
    }).with_columns(
        pl.lit(trajectory_name).alias("trajectory").cast(pl.Categorical),
        pl.col("component").cast(pl.Categorical),
        pl.lit(units).alias("units").cast(pl.Categorical),
    ).select(["keyframe", "timestamp_s", "joint", "display_name", "trajectory", "component", "value", "units"])


def keyframes_to_tidy_dataframe(keyframes: list[Keyframe]) -> pl.DataFrame:
    """
    Columns:
        - keyframe: int, index in the resolved sequence
        - timestamp_s: float
        - joint / display_name: str
        - trajectory: `orientation` or `position`
        - component: x, y, z (, w)
        - value: float
        - units: `quaternion` or `model_units`
    """
    dataframe_chunks: list[pl.DataFrame] = []
    for keyframe_index, keyframe in enumerate(keyframes):
        if not keyframe.joint_states:
            continue
        orientations = np.array([state.orientation.to_array() for state in keyframe.joint_states])
        positions = np.array([state.position.to_array() for state in keyframe.joint_states])
        dataframe_chunks.append(_build_joint_chunk(
            keyframe_index, keyframe, "orientation", ORIENTATION_COMPONENTS, orientations, "quaternion",
        ))
        dataframe_chunks.append(_build_joint_chunk(
            keyframe_index, keyframe, "position", POSITION_COMPONENTS, positions, "model_units",
        ))

    if not dataframe_chunks:
        return pl.DataFrame(schema={
            "keyframe": pl.Int64,
            "timestamp_s": pl.Float64,
            "joint": pl.String,
            "display_name": pl.String,
            "trajectory": pl.Categorical,
            "component": pl.Categorical,
            "value": pl.Float64,
            "units": pl.Categorical,
        })

    df = pl.concat(dataframe_chunks)
    return df.sort(by=["keyframe"], maintain_order=True)


def save_keyframes_csv(keyframes: list[Keyframe], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    df = keyframes_to_tidy_dataframe(keyframes)
    df.write_csv(path)
    logger.info(f"Saved {len(df)} keyframe rows to {path}")
    return path
