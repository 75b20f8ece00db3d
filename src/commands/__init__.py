from .catalog import COMMAND_CATALOG, CommandSpec, complete_command, suggest_commands
from .interpreter import CommandInterpreter
from .types import (
    LINE_CLEAR,
    LINE_ERROR,
    LINE_HELP,
    LINE_INPUT,
    LINE_OUTPUT,
    LINE_SYSTEM,
    CommandResult,
    LineKind,
    OutputEvent,
    ParsedCommand,
    ValidationResult,
)
from .validation import RateLimiter, sanitize_string, validate_command

__all__ = [
    "COMMAND_CATALOG",
    "CommandInterpreter",
    "CommandResult",
    "CommandSpec",
    "LINE_CLEAR",
    "LINE_ERROR",
    "LINE_HELP",
    "LINE_INPUT",
    "LINE_OUTPUT",
    "LINE_SYSTEM",
    "LineKind",
    "OutputEvent",
    "ParsedCommand",
    "RateLimiter",
    "ValidationResult",
    "complete_command",
    "sanitize_string",
    "suggest_commands",
    "validate_command",
]
