"""Error taxonomy for compiling Motion Pose Language documents."""


class CompileError(ValueError):
    """Base class for every failure of a compile call. Carries an optional 1-based line number."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.message = message
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        return f"Line {self.line}: {self.message}"

    def with_line(self, line: int) -> "CompileError":
        """Copy of this error pinned to `line`, keeping the concrete error type."""
        error = self.__class__.__new__(self.__class__)
        error.__dict__.update(self.__dict__)
        CompileError.__init__(error, self.message, line)
        return error


class ParseError(CompileError):
    """Malformed statement syntax, missing name, or missing terminator."""
    pass


class UnknownCombinationError(CompileError):
    """A (joint, action, direction) triple that the constraint database does not define."""
    pass


class LimitExceededError(CompileError):
    """A statement asks for more degrees than the rule allows."""
    pass


class NestedBlockError(CompileError):
    pass


class UnbalancedBraceError(CompileError):
    pass


class UnclosedBlockError(CompileError):
    pass


class UnexpectedTextError(CompileError):
    """Non-blank text outside any block."""
    pass


class DuplicateNameError(CompileError):
    pass


class NameKindConflictError(CompileError):
    """A name used for a pose is reused for an animation, or the other way around."""
    pass


class UnknownReferenceError(CompileError):
    """A pose or animation reference that does not resolve to an earlier declaration."""

    def __init__(self, message: str, reference: str, line: int | None = None) -> None:
        self.reference = reference
        super().__init__(message, line)
