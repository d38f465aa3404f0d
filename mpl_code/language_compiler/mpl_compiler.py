"""
Compiler for Motion Pose Language documents.

A document is a sequence of blocks:

    @pose wave_up {
        arm_r sway left 60;
        elbow_r bend forward 45;
    }

    @animation greet {
        wave_up 0.5s;
        wave_up & smile 1s;
    }

    main {
        greet;
    }

Blocks open on a line whose first token is `@pose`, `@animation` or `main` and close when
their braces balance. Statements end with `;` and may share a line with the braces.
Compilation stops at the first error, which carries the 1-based line it was found on.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator

from mpl_code.joint_constraints.joint_constraint_database import (
    JointConstraintDatabase,
    get_joint_constraint_database,
)
from mpl_code.language_compiler.animation_model import Animation, AnimationDialect, AnimationFrame
from mpl_code.language_compiler.script_model import Script
from mpl_code.language_compiler.statement_parsers import (
    parse_duration_frame,
    parse_main_reference,
    parse_pose_statement,
    parse_timestamp_frame,
)
from mpl_code.mpl_errors import (
    CompileError,
    DuplicateNameError,
    NameKindConflictError,
    NestedBlockError,
    ParseError,
    UnbalancedBraceError,
    UnclosedBlockError,
    UnexpectedTextError,
    UnknownReferenceError,
)
from mpl_code.pose_algebra.pose_model import Pose
from mpl_code.pose_algebra.pose_statement_model import PoseStatement

logger = logging.getLogger(__name__)

STATEMENT_TERMINATOR = ";"
BLOCK_OPEN = "{"
BLOCK_CLOSE = "}"
_FIRST_TOKEN = re.compile(r"[^\s{]+")


class BlockKind(str, Enum):
    POSE = "@pose"
    ANIMATION = "@animation"
    MAIN = "main"


def block_kind_of(line: str) -> BlockKind | None:
    """Kind of block this line opens, judged by its first token."""
    match = _FIRST_TOKEN.match(line.strip())
    if match is None:
        return None
    try:
        return BlockKind(match.group(0))
    except ValueError:
        return None


@dataclass
class SourceStatement:
    line: int
    text: str


@dataclass
class RawBlock:
    """A block cut out of the document: its header words and the `;`-separated statements of its body."""

    kind: BlockKind
    line: int
    header: list[str] = field(default_factory=list)
    statements: list[SourceStatement] = field(default_factory=list)


class BlockScanner:
    """
    Line-driven state machine: outside a block, or inside one until braces balance.

    Produces RawBlocks; knows nothing about what the statements mean.
    """

    def __init__(self) -> None:
        self._block: RawBlock | None = None
        self._opened = False
        self._header_text = ""
        self._pending_text = ""
        self._pending_line = 0

    def scan(self, text: str) -> Iterator[RawBlock]:
        """Yield each block as soon as it closes, so errors surface in document order."""
        for line_number, line in enumerate(text.splitlines(), start=1):
            block = self._scan_line(line, line_number)
            if block is not None:
                yield block
        if self._block is not None:
            raise UnclosedBlockError("Unclosed block", line=self._block.line)

    def _scan_line(self, line: str, line_number: int) -> RawBlock | None:
        stripped = line.strip()
        if not stripped:
            return None

        kind = block_kind_of(stripped)
        if self._block is None:
            if kind is None:
                if stripped.startswith(BLOCK_CLOSE):
                    raise UnbalancedBraceError("Unexpected closing brace", line=line_number)
                raise UnexpectedTextError("Invalid text outside of block", line=line_number)
            self._start_block(kind, line_number)
            stripped = stripped[len(kind.value):]
        elif kind is not None:
            raise NestedBlockError("Nested block is not allowed", line=line_number)

        return self._consume(stripped, line_number)

    def _start_block(self, kind: BlockKind, line_number: int) -> None:
        self._block = RawBlock(kind=kind, line=line_number)
        self._opened = False
        self._header_text = ""
        self._pending_text = ""

    def _consume(self, text: str, line_number: int) -> RawBlock | None:
        block = self._block
        for index, char in enumerate(text):
            if char == BLOCK_OPEN:
                if self._opened:
                    raise ParseError("Nested braces are not allowed inside a block", line=line_number)
                self._opened = True
                continue
            if char == BLOCK_CLOSE:
                if not self._opened:
                    raise UnbalancedBraceError("Unexpected closing brace", line=line_number)
                self._finish_body()
                remainder = text[index + 1:].strip()
                if remainder.startswith(BLOCK_CLOSE):
                    raise UnbalancedBraceError("Unexpected closing brace", line=line_number)
                if remainder:
                    raise UnexpectedTextError(f"Invalid text after closing brace: '{remainder}'", line=line_number)
                self._block = None
                return block
            if not self._opened:
                self._header_text += char
                continue
            if char == STATEMENT_TERMINATOR:
                self._emit_statement()
                continue
            if not self._pending_text.strip() and not char.isspace():
                self._pending_line = line_number
            self._pending_text += char

        if not self._opened:
            self._header_text += " "
        else:
            self._pending_text += " "
        return None

    def _emit_statement(self) -> None:
        statement_text = self._pending_text.strip()
        if statement_text:
            self._block.statements.append(SourceStatement(line=self._pending_line, text=statement_text))
        self._pending_text = ""

    def _finish_body(self) -> None:
        leftover = self._pending_text.strip()
        if leftover:
            raise ParseError("Statement must end with semicolon", line=self._pending_line)
        self._pending_text = ""
        self._block.header = self._header_text.split()


class MplCompiler:
    """Turns one document into one Script, or raises the first CompileError."""

    def __init__(
        self,
        database: JointConstraintDatabase | None = None,
        dialect: AnimationDialect = AnimationDialect.DURATION,
    ) -> None:
        self.database = database or get_joint_constraint_database()
        self.dialect = dialect

    def compile(self, text: str) -> Script:
        poses: dict[str, Pose] = {}
        animations: dict[str, Animation] = {}
        main: list[str] | None = None

        for block in BlockScanner().scan(text):
            if block.kind == BlockKind.POSE:
                pose = self._compile_pose(block, poses, animations)
                poses[pose.name] = pose
                logger.info(f"Compiled pose '{pose.name}' ({len(pose.statements)} statements)")
            elif block.kind == BlockKind.ANIMATION:
                animation = self._compile_animation(block, poses, animations)
                animations[animation.name] = animation
                logger.info(f"Compiled animation '{animation.name}' ({len(animation.frames)} frames)")
            else:
                if main is not None:
                    raise DuplicateNameError("Duplicate main block", line=block.line)
                main = self._compile_main(block, poses, animations)
                logger.info(f"Compiled main sequence ({len(main)} entries)")

        return Script(poses=poses, animations=animations, main=tuple(main or ()), dialect=self.dialect)

    @staticmethod
    def _block_name(block: RawBlock, kind_label: str) -> str:
        if not block.header:
            raise ParseError(f"Missing {kind_label} name", line=block.line)
        if len(block.header) > 1:
            raise ParseError(f"Invalid {kind_label} declaration: '{' '.join(block.header)}'", line=block.line)
        return block.header[0]

    @staticmethod
    def _check_new_name(
        name: str,
        kind_label: str,
        line: int,
        same_kind: dict[str, object],
        other_kind: dict[str, object],
    ) -> None:
        if name in same_kind:
            raise DuplicateNameError(f"Duplicate {kind_label} name: '{name}'", line=line)
        if name in other_kind:
            used_by = "an animation" if kind_label == "pose" else "a pose"
            raise NameKindConflictError(f"Name '{name}' already used by {used_by}", line=line)

    def _compile_pose(
        self,
        block: RawBlock,
        poses: dict[str, Pose],
        animations: dict[str, Animation],
    ) -> Pose:
        name = self._block_name(block, "pose")
        self._check_new_name(name, "pose", block.line, poses, animations)
        statements: list[PoseStatement] = []
        for source in block.statements:
            try:
                statement = parse_pose_statement(source.text, self.database)
            except CompileError as e:
                raise e.with_line(source.line) from e
            logger.debug(f"{name}: {statement.to_text()}")
            statements.append(statement)
        if not statements:
            raise ParseError("Pose must contain at least one statement", line=block.line)
        return Pose(name=name, statements=tuple(statements))

    def _parse_frame(self, text: str) -> AnimationFrame:
        if self.dialect == AnimationDialect.TIMESTAMP:
            return parse_timestamp_frame(text)
        return parse_duration_frame(text)

    def _compile_animation(
        self,
        block: RawBlock,
        poses: dict[str, Pose],
        animations: dict[str, Animation],
    ) -> Animation:
        name = self._block_name(block, "animation")
        self._check_new_name(name, "animation", block.line, animations, poses)
        frames: list[AnimationFrame] = []
        for source in block.statements:
            try:
                frame = self._parse_frame(source.text)
            except CompileError as e:
                raise e.with_line(source.line) from e
            for pose_ref in frame.pose_refs:
                if pose_ref not in poses:
                    raise UnknownReferenceError(
                        f"Animation '{name}' references unknown pose '{pose_ref}'",
                        reference=pose_ref,
                        line=source.line,
                    )
            logger.debug(f"{name}: {' & '.join(frame.pose_refs)} @ {frame.time_or_duration}")
            frames.append(frame)
        if not frames:
            raise ParseError("Animation must contain at least one statement", line=block.line)
        return Animation(name=name, frames=tuple(frames))

    def _compile_main(
        self,
        block: RawBlock,
        poses: dict[str, Pose],
        animations: dict[str, Animation],
    ) -> list[str]:
        if block.header:
            raise ParseError(f"Invalid main declaration: 'main {' '.join(block.header)}'", line=block.line)
        references = []
        for source in block.statements:
            try:
                reference = parse_main_reference(source.text)
            except CompileError as e:
                raise e.with_line(source.line) from e
            if reference not in poses and reference not in animations:
                raise UnknownReferenceError(
                    f"Main references unknown animation or pose '{reference}'",
                    reference=reference,
                    line=source.line,
                )
            references.append(reference)
        if not references:
            raise ParseError("Main block must contain at least one reference", line=block.line)
        return references


def compile_script(
    text: str,
    database: JointConstraintDatabase | None = None,
    dialect: AnimationDialect = AnimationDialect.DURATION,
) -> Script:
    return MplCompiler(database=database, dialect=dialect).compile(text)
