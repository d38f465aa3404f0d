"""Configuration for compiling, decomposing and writing motion files."""
import logging
import tomllib
from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator

from mpl_code.language_compiler.animation_model import AnimationDialect

logger = logging.getLogger(__name__)


class DecompositionConfig(BaseModel):
    """Tolerances and search budget for turning orientations back into statements."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    tolerance: float = 1e-4
    """Largest accepted angular distance between target and recomposed orientation"""

    exact_axis_alignment: float = 0.999
    """|dot| between rotation axis and rule axis above which the single-rule shortcut applies"""

    min_active_degrees: float = 0.01
    """Degree values at or below this are treated as no rotation during search"""

    search_tolerance: float = 1e-6
    search_max_iterations: int = 800
    initial_simplex_step: float = 0.1
    """Initial simplex edge, as a fraction of each rule's limit"""

    refine_tolerance: float = 1e-8
    refine_max_iterations: int = 600
    refine_simplex_step: float = 0.05

    visible_degrees: float = 1.0
    """Statements below this many degrees are dropped from the output"""

    snap_granularity: float = 0.1
    statement_precision: int = 3
    """Decimal places kept on statement degrees"""

    seed_fractions: tuple[tuple[float, ...], ...] = ((0.0,), (0.5,), (0.3, 0.7))
    """Starting points as fractions of each limit; a seed's fractions repeat across the axes"""

    parallel_seeds: bool = False

    @field_validator(
        "tolerance",
        "search_tolerance",
        "refine_tolerance",
        "initial_simplex_step",
        "refine_simplex_step",
        "snap_granularity",
    )
    @classmethod
    def must_be_positive(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"Must be positive, got {v}")
        return v

    @field_validator("search_max_iterations", "refine_max_iterations")
    @classmethod
    def iterations_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Need at least one iteration, got {v}")
        return v

    @field_validator("exact_axis_alignment")
    @classmethod
    def alignment_in_range(cls, v: float) -> float:
        if not 0.0 < v <= 1.0:
            raise ValueError(f"exact_axis_alignment must be in (0, 1], got {v}")
        return v

    @field_validator("seed_fractions")
    @classmethod
    def seeds_not_empty(cls, v: tuple[tuple[float, ...], ...]) -> tuple[tuple[float, ...], ...]:
        if len(v) == 0 or any(len(seed) == 0 for seed in v):
            raise ValueError("seed_fractions needs at least one non-empty seed")
        for seed in v:
            for fraction in seed:
                if not 0.0 <= fraction <= 1.0:
                    raise ValueError(f"Seed fractions must be in [0, 1], got {fraction}")
        return v


class MotionFileConfig(BaseModel):
    """Settings for the binary motion file writer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    frames_per_second: float = 60.0
    model_name: str = ""
    interpolation_byte: int = 20

    @field_validator("frames_per_second")
    @classmethod
    def fps_positive(cls, v: float) -> float:
        if v <= 0.0:
            raise ValueError(f"frames_per_second must be positive, got {v}")
        return v

    @field_validator("interpolation_byte")
    @classmethod
    def fits_in_byte(cls, v: int) -> int:
        if not 0 <= v <= 255:
            raise ValueError(f"interpolation_byte must fit in one byte, got {v}")
        return v


class MplConfig(BaseModel):
    """Complete configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    dialect: AnimationDialect = AnimationDialect.DURATION
    """Animation statement grammar used by the compiler"""

    decomposition: DecompositionConfig = DecompositionConfig()
    motion_file: MotionFileConfig = MotionFileConfig()
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level '{v}'")
        return level


def load_config(path: Path | str) -> MplConfig:
    """Read and validate a TOML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "rb") as f:
        data = tomllib.load(f)
    config = MplConfig.model_validate(data)
    logger.debug(f"Loaded config from {path}: {config}")
    return config
