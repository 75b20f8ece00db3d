"""Serialization of outbound UI events, sticky replay, and inbound parsing."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from contracts.ui_protocol import (
    MESSAGE_COMMAND,
    MESSAGE_COMPLETE,
    STICKY_EVENT_ORDER,
    STICKY_EVENT_TYPES,
)

MAX_CLIENT_TEXT_LENGTH = 500


@dataclass(frozen=True)
class ClientMessage:
    """A command line or completion request sent by a websocket client."""
    type: str
    text: str


def make_event(
    event_type: str,
    *,
    now_fn: Callable[[], datetime] | None = None,
    **payload: Any,
) -> str:
    """Serialize an event payload with type and timestamp for websocket delivery."""
    now = now_fn() if now_fn is not None else datetime.now(timezone.utc)
    return json.dumps(
        {
            "type": event_type,
            "timestamp": now.isoformat(),
            **payload,
        }
    )


def parse_client_message(raw: str | bytes) -> Optional[ClientMessage]:
    """Decode an inbound websocket frame; None for anything malformed."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(decoded, dict):
        return None

    message_type = decoded.get("type")
    text = decoded.get("text")
    if message_type not in (MESSAGE_COMMAND, MESSAGE_COMPLETE):
        return None
    if not isinstance(text, str) or len(text) > MAX_CLIENT_TEXT_LENGTH:
        return None
    return ClientMessage(type=message_type, text=text)


class StickyEventStore:
    """Thread-safe cache of sticky events replayed to new websocket clients."""
    def __init__(self):
        self._events: dict[str, str] = {}
        self._lock = threading.Lock()

    def remember(self, event_type: str, message: str) -> None:
        if event_type not in STICKY_EVENT_TYPES:
            return
        with self._lock:
            self._events[event_type] = message

    def snapshot(self) -> list[str]:
        with self._lock:
            return [self._events[key] for key in STICKY_EVENT_ORDER if key in self._events]
