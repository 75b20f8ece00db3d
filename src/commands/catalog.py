"""Command catalog used for help output, suggestions and tab completion."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from contracts.command_contract import (
    CMD_CLEAR,
    CMD_COMMIT,
    CMD_COMPLETE,
    CMD_CONFIRM_RESET,
    CMD_HELP,
    CMD_LOGOUT,
    CMD_PAUSE,
    CMD_PLAY,
    CMD_RESET,
    CMD_RESET_DATA,
    CMD_SESSION,
    CMD_SET,
    CMD_SOUND,
    CMD_STATS,
    CMD_SYNC,
    CMD_THEME,
    COMMAND_NAME_ORDER,
)


@dataclass(frozen=True)
class CommandSpec:
    name: str
    description: str
    usage: Optional[str] = None

    @property
    def command(self) -> str:
        return f"/{self.name}"

    @property
    def signature(self) -> str:
        return self.usage or self.command


_DESCRIPTIONS: dict[str, tuple[str, Optional[str]]] = {
    CMD_PLAY: ("Start or resume the timer", None),
    CMD_PAUSE: ("Pause the timer", None),
    CMD_RESET: ("Reset the current timer segment", None),
    CMD_COMPLETE: ("Manually complete the current session early", None),
    CMD_COMMIT: ("Log a message for the current session", '/commit "message"'),
    CMD_SESSION: ("Set a name for the current focus session", '/session "name"'),
    CMD_SET: ("Set durations", "/set [work|break|long] <minutes>"),
    CMD_THEME: ("Switch color theme", "/theme [light|dark]"),
    CMD_SOUND: ("Toggle completion sound", "/sound [on|off]"),
    CMD_STATS: ("Show current statistics", None),
    CMD_SYNC: ("Reload settings and statistics from the store", None),
    CMD_CLEAR: ("Clear terminal output", None),
    CMD_LOGOUT: ("Sign out of your account", None),
    CMD_RESET_DATA: ("Reset all saved data (requires confirmation)", None),
    CMD_CONFIRM_RESET: ("Confirm a pending data reset", None),
    CMD_HELP: ("Show this help message", None),
}

COMMAND_CATALOG: tuple[CommandSpec, ...] = tuple(
    CommandSpec(name, *_DESCRIPTIONS[name]) for name in COMMAND_NAME_ORDER
)


def suggest_commands(prefix: str) -> list[CommandSpec]:
    """Return catalog entries whose command starts with ``prefix``.

    Only a bare command token is completed; once arguments begin there is
    nothing to suggest.
    """
    if not prefix.startswith("/") or " " in prefix:
        return []
    needle = prefix.lower()
    return [spec for spec in COMMAND_CATALOG if spec.command.startswith(needle)]


def complete_command(text: str) -> str:
    """Tab completion: a unique match gets a trailing space, otherwise the
    longest common prefix of all matches; unchanged when nothing matches."""
    matches = suggest_commands(text)
    if not matches:
        return text
    if len(matches) == 1:
        return matches[0].command + " "
    common = os.path.commonprefix([spec.command for spec in matches])
    return common if len(common) > len(text) else text
