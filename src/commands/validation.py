"""Pure sanitization and validation helpers for command text and arguments."""

from __future__ import annotations

import re
import time
from collections import deque
from typing import Callable, Optional

from contracts.command_contract import SET_TARGETS, SOUND_OFF, SOUND_ON
from pomodoro.constants import (
    MAX_COMMIT_MESSAGE_LENGTH,
    MAX_SESSION_NAME_LENGTH,
    THEMES,
)

from .types import VALID, ParsedCommand, ValidationResult, invalid

MAX_COMMAND_LENGTH = 500
MAX_SANITIZED_LENGTH = 1000
MAX_SET_MINUTES = 1440

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]")
_HTML_ESCAPES = {
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "&": "&amp;",
}
_HTML_SPECIALS = re.compile(r"[<>'\"&]")
_COMMAND_PATTERN = re.compile(r"^/[a-zA-Z][a-zA-Z0-9-]*(\s.*)?$")
_SURROUNDING_QUOTES = re.compile(r"^[\"']|[\"']$")


def strip_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def sanitize_string(text: str) -> str:
    """Remove control characters, escape HTML specials, trim, cap length."""
    if not isinstance(text, str):
        return ""
    escaped = _HTML_SPECIALS.sub(
        lambda match: _HTML_ESCAPES[match.group(0)],
        strip_control_chars(text),
    )
    return escaped.strip()[:MAX_SANITIZED_LENGTH]


def strip_quotes(text: str) -> str:
    """Drop one leading and one trailing quote character, as typed in `/commit "x"`."""
    return _SURROUNDING_QUOTES.sub("", text.strip())


def validate_command(text: str) -> ValidationResult:
    if not text or not isinstance(text, str):
        return invalid("Command cannot be empty")
    if len(text) > MAX_COMMAND_LENGTH:
        return invalid("Command too long")

    sanitized = sanitize_string(text)
    if not sanitized:
        return invalid("Command cannot be empty")
    if not sanitized.startswith("/"):
        return invalid("Commands must start with /")
    if not _COMMAND_PATTERN.match(sanitized):
        return invalid("Invalid command format")
    return VALID


def parse_command(text: str) -> ParsedCommand:
    """Split a line that passed ``validate_command`` into name and arguments.

    Arguments are kept raw (control characters removed) so handlers can strip
    quotes before sanitizing the text they store.
    """
    cleaned = strip_control_chars(text).strip()
    token, _, rest = cleaned.partition(" ")
    arg_string = rest.strip()
    return ParsedCommand(
        name=token[1:].lower(),
        token=token,
        args=tuple(arg_string.split()),
        arg_string=arg_string,
    )


def validate_set_command(args: tuple[str, ...]) -> ValidationResult:
    if len(args) != 2:
        return invalid("Usage: /set [work|break|long] <minutes>")
    target, raw_minutes = args[0].lower(), args[1]
    if target not in SET_TARGETS:
        return invalid("Invalid type. Use 'work', 'break', or 'long'.")
    minutes = parse_minutes(raw_minutes)
    if minutes is None or minutes <= 0:
        return invalid("Minutes must be a positive number.")
    if minutes > MAX_SET_MINUTES:
        return invalid(f"Duration cannot exceed {MAX_SET_MINUTES} minutes.")
    return VALID


def parse_minutes(raw: str) -> Optional[int]:
    try:
        return int(raw.strip(), 10)
    except ValueError:
        return None


def validate_session_name(name: str) -> ValidationResult:
    sanitized = sanitize_string(name)
    if not sanitized:
        return invalid("Session name cannot be empty.")
    if len(sanitized) > MAX_SESSION_NAME_LENGTH:
        return invalid(
            f"Session name cannot exceed {MAX_SESSION_NAME_LENGTH} characters."
        )
    return VALID


def validate_commit_message(message: str) -> ValidationResult:
    sanitized = sanitize_string(message)
    if not sanitized:
        return invalid("Commit message cannot be empty.")
    if len(sanitized) > MAX_COMMIT_MESSAGE_LENGTH:
        return invalid(
            f"Commit message cannot exceed {MAX_COMMIT_MESSAGE_LENGTH} characters."
        )
    return VALID


def validate_theme(theme: str) -> ValidationResult:
    sanitized = sanitize_string(theme)
    if sanitized and sanitized.lower() not in THEMES:
        return invalid("Invalid theme. Use 'light' or 'dark'.")
    return VALID


def validate_sound(option: str) -> ValidationResult:
    sanitized = sanitize_string(option)
    if sanitized and sanitized.lower() not in (SOUND_ON, SOUND_OFF):
        return invalid("Invalid sound option. Use 'on' or 'off'.")
    return VALID


class RateLimiter:
    """Sliding-window limiter keyed by caller identity."""

    def __init__(
        self,
        max_requests: int = 20,
        window_seconds: float = 60.0,
        *,
        monotonic_fn: Optional[Callable[[], float]] = None,
    ):
        if max_requests <= 0:
            raise ValueError("max_requests must be greater than zero")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be greater than zero")
        self._max_requests = max_requests
        self._window_seconds = window_seconds
        self._monotonic = monotonic_fn or time.monotonic
        self._requests: dict[str, deque[float]] = {}

    def is_allowed(self, identifier: str) -> bool:
        now = self._monotonic()
        requests = self._requests.setdefault(identifier, deque())
        while requests and now - requests[0] >= self._window_seconds:
            requests.popleft()
        if len(requests) >= self._max_requests:
            return False
        requests.append(now)
        return True
