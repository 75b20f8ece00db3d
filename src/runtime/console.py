"""Plain terminal rendering of output events."""

from __future__ import annotations

import sys
import threading
from typing import Sequence, TextIO

from commands import LINE_CLEAR, LINE_ERROR, LINE_INPUT, OutputEvent

_CLEAR_SCREEN = "\033[2J\033[H"
_BELL = "\a"


class ConsoleRenderer:
    """Writes output events to a text stream, one line per event."""

    def __init__(self, stream: TextIO | None = None):
        self._stream = stream or sys.stdout
        self._lock = threading.Lock()

    def render(self, events: Sequence[OutputEvent]) -> None:
        with self._lock:
            for event in events:
                self._stream.write(self._format(event))
            self._stream.flush()

    def bell(self) -> None:
        with self._lock:
            self._stream.write(_BELL)
            self._stream.flush()

    def _format(self, event: OutputEvent) -> str:
        if event.kind == LINE_CLEAR:
            return _CLEAR_SCREEN if self._stream.isatty() else "\n"
        if event.kind == LINE_INPUT:
            return f"> {event.text}\n"
        if event.kind == LINE_ERROR and not event.text.startswith("["):
            return f"Error: {event.text}\n"
        return f"{event.text}\n"
