"""Websocket event, state and inbound message constants."""

from __future__ import annotations

# Websocket event types
EVENT_HELLO = "hello"
EVENT_STATE_UPDATE = "state_update"
EVENT_OUTPUT = "output"
EVENT_TIMER = "timer"
EVENT_STATS = "stats"
EVENT_SYNC = "sync"
EVENT_SUGGESTIONS = "suggestions"
EVENT_ERROR = "error"

# UI runtime states
STATE_IDLE = "idle"
STATE_RUNNING = "running"
STATE_BUSY = "busy"
STATE_SIGNED_OUT = "signed_out"
STATE_ERROR = "error"

# Inbound client message types
MESSAGE_COMMAND = "command"
MESSAGE_COMPLETE = "complete"

STICKY_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EVENT_STATE_UPDATE,
        EVENT_TIMER,
        EVENT_STATS,
        EVENT_SYNC,
        EVENT_ERROR,
    }
)

STICKY_EVENT_ORDER: tuple[str, ...] = (
    EVENT_TIMER,
    EVENT_STATS,
    EVENT_SYNC,
    EVENT_ERROR,
    EVENT_STATE_UPDATE,
)
