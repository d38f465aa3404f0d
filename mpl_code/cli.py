"""Command-line interface for compiling and decomposing Motion Pose Language."""

import argparse
import logging
import sys
from pathlib import Path

from mpl_code.joint_constraints.joint_constraint_database import get_joint_constraint_database
from mpl_code.kinematics_core.quaternion_model import Quaternion
from mpl_code.language_compiler.animation_model import AnimationDialect
from mpl_code.language_compiler.mpl_compiler import MplCompiler
from mpl_code.motion_file.vmd_writer import MotionFileWriter
from mpl_code.mpl_config import MplConfig, load_config
from mpl_code.mpl_errors import CompileError
from mpl_code.pose_algebra.joint_decomposer import JointDecomposer
from mpl_code.pose_algebra.joint_orientation_state_model import JointOrientationState
from mpl_code.timeline.keyframe_serialization import save_keyframes_csv
from mpl_code.timeline.timeline_resolver import resolve_timeline

logger = logging.getLogger(__name__)


def _load_config(args: argparse.Namespace) -> MplConfig:
    config = load_config(Path(args.config)) if args.config else MplConfig()
    if getattr(args, "dialect", None):
        config = config.model_copy(update={"dialect": AnimationDialect(args.dialect)})
    return config


def cmd_compile(*, args: argparse.Namespace, config: MplConfig) -> None:
    """Compile a script and write the motion file."""
    database = get_joint_constraint_database()
    text = Path(args.input).read_text(encoding="utf-8")
    script = MplCompiler(database=database, dialect=config.dialect).compile(text)
    keyframes = resolve_timeline(script, database)

    output_path = Path(args.output) if args.output else Path(args.input).with_suffix(".vmd")
    MotionFileWriter(config.motion_file).write(keyframes, output_path)
    if args.csv:
        save_keyframes_csv(keyframes, Path(args.csv))

    logger.info(f"✓ {len(script.poses)} poses, {len(script.animations)} animations -> {output_path}")


def cmd_decompose(*, args: argparse.Namespace, config: MplConfig) -> None:
    """Print the statements that reproduce a quaternion on one joint."""
    database = get_joint_constraint_database()
    if not database.has_joint(args.joint):
        raise SystemExit(f"Unknown joint '{args.joint}'")
    state = JointOrientationState(
        joint=args.joint,
        display_name=database.display_name_or_self(args.joint),
        orientation=Quaternion.from_array(args.quaternion),
    )
    pose = JointDecomposer(database=database, config=config.decomposition).pose_from_orientations(args.name, [state])
    print(pose.to_text())


def cmd_joints(*, args: argparse.Namespace, config: MplConfig) -> None:
    """List joints, or the actions / directions of one joint."""
    database = get_joint_constraint_database()
    if args.joint is None:
        for joint in database.joints():
            print(f"{joint}\t{database.display_name_or_self(joint)}")
        return

    actions = database.actions(args.joint)
    if actions is None:
        raise SystemExit(f"Unknown joint '{args.joint}'")
    selected = [args.action] if args.action else list(actions)
    for action in selected:
        directions = database.directions(args.joint, action)
        if directions is None:
            raise SystemExit(f"Joint '{args.joint}' has no action '{action}'")
        for direction in directions:
            print(f"{args.joint} {action} {direction}\tmax {database.limit(args.joint, action, direction):g}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Motion Pose Language compiler",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:

  # Compile a script to a motion file (and a tidy CSV of the keyframes)
  mpl compile dance.mpl -o dance.vmd --csv dance_keyframes.csv

  # Turn a captured rotation back into statements (head turn right 30)
  mpl decompose --joint head --quaternion 0 0.2588 0 0.9659

  # Show what the rig allows
  mpl joints
  mpl joints head bend
        """
    )
    parser.add_argument(
        '--config', '-c',
        help='TOML configuration file'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Log debug output'
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # ========== COMPILE command ==========
    compile_parser = subparsers.add_parser(
        'compile',
        help='Compile a script into a motion file'
    )
    compile_parser.add_argument(
        'input',
        help='Script file'
    )
    compile_parser.add_argument(
        '--output', '-o',
        help='Motion file to write (default: input with .vmd suffix)'
    )
    compile_parser.add_argument(
        '--csv',
        help='Also write the resolved keyframes as a tidy CSV'
    )
    compile_parser.add_argument(
        '--dialect',
        choices=[dialect.value for dialect in AnimationDialect],
        help='Animation statement grammar (default: from config, else duration)'
    )

    # ========== DECOMPOSE command ==========
    decompose_parser = subparsers.add_parser(
        'decompose',
        help='Print statements reproducing a joint rotation'
    )
    decompose_parser.add_argument(
        '--joint', '-j',
        required=True,
        help='Internal joint name, e.g. head'
    )
    decompose_parser.add_argument(
        '--quaternion', '-q',
        required=True,
        type=float,
        nargs=4,
        metavar=('X', 'Y', 'Z', 'W'),
        help='Target rotation'
    )
    decompose_parser.add_argument(
        '--name',
        default='captured',
        help='Pose name in the output (default: captured)'
    )

    # ========== JOINTS command ==========
    joints_parser = subparsers.add_parser(
        'joints',
        help='List joints, actions and directions'
    )
    joints_parser.add_argument('joint', nargs='?')
    joints_parser.add_argument('action', nargs='?')

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    config = _load_config(args)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else config.log_level,
        format='%(levelname)s | %(message)s'
    )

    try:
        if args.command == 'compile':
            cmd_compile(args=args, config=config)
        elif args.command == 'decompose':
            cmd_decompose(args=args, config=config)
        elif args.command == 'joints':
            cmd_joints(args=args, config=config)
    except CompileError as e:
        logger.error(f"Compile failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
