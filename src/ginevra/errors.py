"""Error and diagnostic types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ginevra.tokens import Position


class Severity(Enum):
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A non-fatal problem reported while preprocessing."""

    severity: Severity
    message: str
    position: Position

    def format(self, filename: str = "input.h") -> str:
        return (
            f"{self.severity.value}: {self.message} "
            f"({filename}:{self.position.line}:{self.position.column})"
        )


class ScanError(Exception):
    """Raised when the input ends inside a string or a comment."""

    def __init__(self, message: str, position: Position) -> None:
        self.message = message
        self.position = position
        super().__init__(self.format())

    def format(self, filename: str = "input.h") -> str:
        return f"error: {self.message} ({filename}:{self.position.line}:{self.position.column})"


class PreprocessError(Exception):
    """Raised on a fatal directive error, e.g. end of file right after #define."""

    def __init__(self, message: str, position: Position) -> None:
        self.message = message
        self.position = position
        super().__init__(self.format())

    def format(self, filename: str = "input.h") -> str:
        return f"error: {self.message} ({filename}:{self.position.line}:{self.position.column})"
