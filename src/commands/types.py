"""Typed values passed between the interpreter, the runtime, and the UI."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Literal, Optional

LineKind = Literal["input", "output", "error", "help", "system", "clear"]

LINE_INPUT = "input"
LINE_OUTPUT = "output"
LINE_ERROR = "error"
LINE_HELP = "help"
LINE_SYSTEM = "system"
LINE_CLEAR = "clear"


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    error: Optional[str] = None


VALID = ValidationResult(True)


def invalid(error: str) -> ValidationResult:
    return ValidationResult(False, error)


@dataclass(frozen=True)
class OutputEvent:
    """One line for display, tagged with how it should be styled."""
    kind: LineKind
    text: str = ""


@dataclass(frozen=True)
class ParsedCommand:
    """A validated command line split into its name and raw arguments."""
    name: str
    token: str
    args: tuple[str, ...] = ()
    arg_string: str = ""


@dataclass(frozen=True)
class CommandResult:
    """Uniform handler outcome plus the lines to display for it."""
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    events: tuple[OutputEvent, ...] = field(default_factory=tuple)

    @classmethod
    def ok(cls, message: str, *events: OutputEvent) -> "CommandResult":
        return cls(True, message=message, events=events)

    @classmethod
    def fail(cls, error: str, *events: OutputEvent) -> "CommandResult":
        return cls(False, error=error, events=events)

    @classmethod
    def rejected(cls, message: str, *events: OutputEvent) -> "CommandResult":
        """Domain no-op: not an error, but nothing happened."""
        return cls(False, message=message, events=events)

    def with_events(
        self,
        *,
        before: tuple[OutputEvent, ...] = (),
        after: tuple[OutputEvent, ...] = (),
    ) -> "CommandResult":
        return replace(self, events=(*before, *self.events, *after))
