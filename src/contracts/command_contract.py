"""Canonical slash-command names shared by the interpreter, catalog, and UI."""

from __future__ import annotations

CMD_PLAY = "play"
CMD_PAUSE = "pause"
CMD_RESET = "reset"
CMD_COMPLETE = "complete"
CMD_COMMIT = "commit"
CMD_SET = "set"
CMD_SESSION = "session"
CMD_THEME = "theme"
CMD_SOUND = "sound"
CMD_STATS = "stats"
CMD_SYNC = "sync"
CMD_HELP = "help"
CMD_CLEAR = "clear"
CMD_LOGOUT = "logout"
CMD_RESET_DATA = "reset-data"
CMD_CONFIRM_RESET = "confirm-reset"

COMMAND_NAME_ORDER: tuple[str, ...] = (
    CMD_PLAY,
    CMD_PAUSE,
    CMD_RESET,
    CMD_COMPLETE,
    CMD_COMMIT,
    CMD_SESSION,
    CMD_SET,
    CMD_THEME,
    CMD_SOUND,
    CMD_STATS,
    CMD_SYNC,
    CMD_CLEAR,
    CMD_LOGOUT,
    CMD_RESET_DATA,
    CMD_CONFIRM_RESET,
    CMD_HELP,
)

COMMAND_NAMES: frozenset[str] = frozenset(COMMAND_NAME_ORDER)

# Commands whose handlers await the store before returning.
ASYNC_COMMANDS: frozenset[str] = frozenset({CMD_STATS, CMD_SYNC, CMD_CONFIRM_RESET})

SET_TARGET_WORK = "work"
SET_TARGET_BREAK = "break"
SET_TARGET_LONG = "long"
SET_TARGETS: tuple[str, ...] = (SET_TARGET_WORK, SET_TARGET_BREAK, SET_TARGET_LONG)

SOUND_ON = "on"
SOUND_OFF = "off"
