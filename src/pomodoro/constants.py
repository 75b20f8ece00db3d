"""Phase, action, reason, and default constants used by the timer engine."""

from __future__ import annotations

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5
DEFAULT_LONG_BREAK_MINUTES = 15

DEFAULT_WORK_SECONDS = DEFAULT_WORK_MINUTES * 60
DEFAULT_BREAK_SECONDS = DEFAULT_BREAK_MINUTES * 60
DEFAULT_LONG_BREAK_SECONDS = DEFAULT_LONG_BREAK_MINUTES * 60

LONG_BREAK_INTERVAL = 4
HISTORY_LIMIT = 50

MAX_SESSION_NAME_LENGTH = 100
MAX_COMMIT_MESSAGE_LENGTH = 500
MAX_RECORD_MINUTES = 480
MAX_COMPLETED_TODAY = 1000

SESSION_NAME_FOCUS = "Focus Session"
SESSION_NAME_SHORT_BREAK = "Short Break"
SESSION_NAME_LONG_BREAK = "Long Break"

THEME_LIGHT = "light"
THEME_DARK = "dark"
THEMES: frozenset[str] = frozenset({THEME_LIGHT, THEME_DARK})

PHASE_WORK = "work"
PHASE_BREAK = "break"

BREAK_SHORT = "short"
BREAK_LONG = "long"

ACTION_START = "start"
ACTION_PAUSE = "pause"
ACTION_RESET = "reset"
ACTION_COMPLETE = "complete"
ACTION_SET_DURATIONS = "set_durations"
ACTION_SET_SESSION = "set_session"
ACTION_SET_THEME = "set_theme"
ACTION_SET_SOUND = "set_sound"

ACTION_SYNC = "sync"
ACTION_TICK = "tick"
ACTION_COMPLETED = "completed"

REASON_STARTED = "started"
REASON_RESUMED = "resumed"
REASON_PAUSED = "paused"
REASON_RESET = "reset"
REASON_COMPLETED = "completed"
REASON_UPDATED = "updated"
REASON_ALREADY_RUNNING = "already_running"
REASON_NOT_RUNNING = "not_running"
REASON_NOT_STARTED = "not_started"

REASON_TICK = "tick"
REASON_STARTUP = "startup"
REASON_REMOTE = "remote"
