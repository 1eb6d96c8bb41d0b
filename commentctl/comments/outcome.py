"""Command outcome value: printed lines plus an optional error and exit code."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LineKind(str, Enum):
    """How the CLI boundary renders an output line."""

    LINE = "line"
    SUCCESS = "success"
    HEADER = "header"


@dataclass(frozen=True)
class OutputLine:
    kind: LineKind
    text: str


@dataclass(frozen=True)
class Outcome:
    """Result of one comment command.

    Operations never print or exit; the CLI renders `lines` to stdout, then
    `error` (if any) to stderr, and exits with `exit_code`.
    """

    lines: tuple[OutputLine, ...] = field(default_factory=tuple)
    error: str | None = None
    exit_code: int = 0

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def ok(cls, *lines: OutputLine, exit_code: int = 0) -> Outcome:
        return cls(lines=tuple(lines), exit_code=exit_code)

    @classmethod
    def success(cls, text: str) -> Outcome:
        return cls(lines=(OutputLine(LineKind.SUCCESS, text),))

    @classmethod
    def fail(cls, message: str, exit_code: int = 1) -> Outcome:
        return cls(error=message, exit_code=exit_code)


def line(text: object) -> OutputLine:
    return OutputLine(LineKind.LINE, str(text))


def header(text: str) -> OutputLine:
    return OutputLine(LineKind.HEADER, text)
