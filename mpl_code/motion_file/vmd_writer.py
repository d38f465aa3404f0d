"""
Binary motion file (VMD) writer.

Layout, all little-endian:
    header          30 bytes  "Vocaloid Motion Data 0002", zero padded
    model name      20 bytes  Shift-JIS, zero padded
    bone count      u32
    bone records    15-byte name, u32 frame, 3 x f32 position, 4 x f32 rotation (x, y, z, w), 64 interpolation bytes
    morph count     u32
    morph records   15-byte name, u32 frame, f32 weight
    camera, light, self-shadow counts   u32 each, always 0
"""
import logging
import struct
from pathlib import Path

from mpl_code.mpl_config import MotionFileConfig
from mpl_code.timeline.keyframe_model import Keyframe

logger = logging.getLogger(__name__)

VMD_HEADER = b"Vocaloid Motion Data 0002"
HEADER_SIZE = 30
MODEL_NAME_SIZE = 20
NAME_SIZE = 15
INTERPOLATION_SIZE = 64
NAME_ENCODING = "shift_jis"

_BONE_RECORD = struct.Struct(f"<{NAME_SIZE}sI3f4f{INTERPOLATION_SIZE}s")
_MORPH_RECORD = struct.Struct(f"<{NAME_SIZE}sIf")
_COUNT = struct.Struct("<I")


def encode_fixed_width(text: str, size: int) -> bytes:
    """Shift-JIS bytes truncated or zero padded to `size`."""
    encoded = text.encode(NAME_ENCODING, errors="replace")
    return encoded[:size].ljust(size, b"\x00")


class MotionFileWriter:
    def __init__(self, config: MotionFileConfig | None = None) -> None:
        self.config = config or MotionFileConfig()

    def frame_index(self, time: float) -> int:
        if time < 0.0:
            raise ValueError(f"Keyframe time cannot be negative, got {time}")
        return int(time * self.config.frames_per_second)

    def to_bytes(self, keyframes: list[Keyframe]) -> bytes:
        interpolation = bytes([self.config.interpolation_byte]) * INTERPOLATION_SIZE
        frame_indices = [self.frame_index(keyframe.time) for keyframe in keyframes]

        bone_records = [
            _BONE_RECORD.pack(
                encode_fixed_width(state.display_name, NAME_SIZE),
                frame,
                state.position.x, state.position.y, state.position.z,
                state.orientation.x, state.orientation.y, state.orientation.z, state.orientation.w,
                interpolation,
            )
            for keyframe, frame in zip(keyframes, frame_indices)
            for state in keyframe.joint_states
        ]
        morph_records = [
            _MORPH_RECORD.pack(encode_fixed_width(morph.display_name, NAME_SIZE), frame, morph.weight)
            for keyframe, frame in zip(keyframes, frame_indices)
            for morph in keyframe.morph_weights
        ]

        chunks = [
            VMD_HEADER.ljust(HEADER_SIZE, b"\x00"),
            encode_fixed_width(self.config.model_name, MODEL_NAME_SIZE),
            _COUNT.pack(len(bone_records)),
            *bone_records,
            _COUNT.pack(len(morph_records)),
            *morph_records,
            _COUNT.pack(0),  # camera
            _COUNT.pack(0),  # light
            _COUNT.pack(0),  # self shadow
        ]
        return b"".join(chunks)

    def write(self, keyframes: list[Keyframe], path: Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = self.to_bytes(keyframes)
        path.write_bytes(data)
        logger.info(f"Wrote {len(keyframes)} keyframes ({len(data)} bytes) to {path}")
        return path
