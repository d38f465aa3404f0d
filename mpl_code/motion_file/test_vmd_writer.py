"""
Tests for the binary motion file writer.

Run with: python -m pytest mpl_code/motion_file
"""
import struct
from pathlib import Path

import pytest

from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.kinematics_core.vector3_model import Vector3
from mpl_code.language_compiler.mpl_compiler import compile_script
from mpl_code.motion_file.vmd_writer import MotionFileWriter, encode_fixed_width
from mpl_code.mpl_config import MotionFileConfig
from mpl_code.pose_algebra.joint_orientation_state_model import JointOrientationState
from mpl_code.timeline.keyframe_model import Keyframe, MorphWeight
from mpl_code.timeline.timeline_resolver import resolve_timeline

BONE_RECORD_SIZE = 15 + 4 + 12 + 16 + 64
MORPH_RECORD_SIZE = 15 + 4 + 4
HEADER_AND_NAME_SIZE = 30 + 20


def create_test_keyframes() -> list[Keyframe]:
    rotation = Quaternion.from_axis_angle(axis=Vector3(x=0.0, y=1.0, z=0.0), degrees=30.0)
    return [
        Keyframe(
            time=0.0,
            joint_states=(JointOrientationState(joint="head", display_name="頭", orientation=rotation),),
        ),
        Keyframe(
            time=1.5,
            joint_states=(
                JointOrientationState(joint="head", display_name="頭", orientation=Quaternion.identity()),
                JointOrientationState(joint="neck", display_name="首", orientation=rotation),
            ),
            morph_weights=(MorphWeight(name="blink", display_name="まばたき", weight=0.75),),
        ),
    ]


def test_layout() -> None:
    print("\n=== Test: VMD Layout ===")
    keyframes = create_test_keyframes()
    data = MotionFileWriter().to_bytes(keyframes)
    assert len(data) == HEADER_AND_NAME_SIZE + 4 + 3 * BONE_RECORD_SIZE + 4 + MORPH_RECORD_SIZE + 12
    assert data[:30] == b"Vocaloid Motion Data 0002".ljust(30, b"\x00")
    assert data[30:50] == b"\x00" * 20

    offset = HEADER_AND_NAME_SIZE
    assert struct.unpack_from("<I", data, offset)[0] == 3
    offset += 4

    name, frame, px, py, pz, qx, qy, qz, qw = struct.unpack_from("<15sI3f4f", data, offset)
    assert name.rstrip(b"\x00").decode("shift_jis") == "頭"
    assert frame == 0
    assert (px, py, pz) == (0.0, 0.0, 0.0)
    assert qy == pytest.approx(keyframes[0].joint_states[0].orientation.y, abs=1e-6)
    assert qw == pytest.approx(keyframes[0].joint_states[0].orientation.w, abs=1e-6)
    assert data[offset + 47: offset + BONE_RECORD_SIZE] == bytes([20]) * 64

    second_frame = struct.unpack_from("<I", data, offset + BONE_RECORD_SIZE + 15)[0]
    assert second_frame == 90
    offset += 3 * BONE_RECORD_SIZE

    assert struct.unpack_from("<I", data, offset)[0] == 1
    offset += 4
    morph_name, morph_frame, weight = struct.unpack_from("<15sIf", data, offset)
    assert morph_name.rstrip(b"\x00").decode("shift_jis") == "まばたき"
    assert morph_frame == 90
    assert weight == pytest.approx(0.75)
    offset += MORPH_RECORD_SIZE

    assert struct.unpack_from("<3I", data, offset) == (0, 0, 0)
    print(f"  ✓ {len(data)} bytes")


def test_empty_keyframes_still_valid() -> None:
    data = MotionFileWriter().to_bytes([])
    assert len(data) == HEADER_AND_NAME_SIZE + 4 + 4 + 12
    assert struct.unpack_from("<5I", data, HEADER_AND_NAME_SIZE) == (0, 0, 0, 0, 0)


def test_negative_time_rejected() -> None:
    keyframes = [Keyframe(time=-0.5)]
    with pytest.raises(ValueError):
        MotionFileWriter().to_bytes(keyframes)


def test_frame_index_truncates() -> None:
    writer = MotionFileWriter()
    assert writer.frame_index(0.999) == 59
    assert writer.frame_index(2.0) == 120
    assert MotionFileWriter(MotionFileConfig(frames_per_second=30.0)).frame_index(2.0) == 60


def test_name_truncated_and_padded() -> None:
    assert encode_fixed_width("頭", 15) == "頭".encode("shift_jis") + b"\x00" * 13
    long_name = "a" * 20
    assert encode_fixed_width(long_name, 15) == b"a" * 15


def test_model_name_and_interpolation_config() -> None:
    config = MotionFileConfig(model_name="ミク", interpolation_byte=107)
    data = MotionFileWriter(config).to_bytes(create_test_keyframes()[:1])
    assert data[30:50].rstrip(b"\x00").decode("shift_jis") == "ミク"
    record_start = HEADER_AND_NAME_SIZE + 4
    assert data[record_start + 47: record_start + BONE_RECORD_SIZE] == bytes([107]) * 64


def test_write_compiled_script(tmp_path: Path) -> None:
    print("\n=== Test: Compile And Write ===")
    script = compile_script("@pose s { head turn left 5; neck bend forward 10; }\nmain { s; s; }")
    keyframes = resolve_timeline(script)
    path = MotionFileWriter().write(keyframes, tmp_path / "motion.vmd")
    data = path.read_bytes()
    assert struct.unpack_from("<I", data, HEADER_AND_NAME_SIZE)[0] == 4
    print(f"  ✓ Wrote {path}")


def run_all_tests() -> None:
    import tempfile

    test_layout()
    test_empty_keyframes_still_valid()
    test_negative_time_rejected()
    test_frame_index_truncates()
    test_name_truncated_and_padded()
    test_model_name_and_interpolation_config()
    with tempfile.TemporaryDirectory() as temporary_directory:
        test_write_compiled_script(Path(temporary_directory))
    print("\n" + "=" * 60)
    print("ALL TESTS PASSED!")
    print("=" * 60)


if __name__ == "__main__":
    run_all_tests()
