from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from commands import CommandSpec, OutputEvent
from contracts.ui_protocol import (
    EVENT_OUTPUT,
    EVENT_STATS,
    EVENT_SUGGESTIONS,
    EVENT_SYNC,
    EVENT_TIMER,
)
from pomodoro import PomodoroSnapshot, Settings, Stats


class UIServerLike(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        ...


class RuntimeUIPublisher:
    def __init__(self, ui_server: Optional[UIServerLike]):
        self._ui_server = ui_server

    def publish(self, event_type: str, **payload: Any) -> None:
        if self._ui_server:
            self._ui_server.publish(event_type, **payload)

    def publish_state(
        self,
        state: str,
        *,
        message: Optional[str] = None,
        **payload: Any,
    ) -> None:
        if self._ui_server:
            self._ui_server.publish_state(state, message=message, **payload)

    def publish_output(self, events: Sequence[OutputEvent]) -> None:
        for event in events:
            self.publish(EVENT_OUTPUT, kind=event.kind, text=event.text)

    def publish_timer_update(
        self,
        snapshot: PomodoroSnapshot,
        *,
        action: str,
        accepted: Optional[bool] = None,
        reason: str = "",
        message: Optional[str] = None,
    ) -> None:
        payload: dict[str, Any] = {
            "action": action,
            "phase": snapshot.phase,
            "session": snapshot.session,
            "is_running": snapshot.is_running,
            "duration_seconds": snapshot.duration_seconds,
            "remaining_seconds": snapshot.remaining_seconds,
            "pomodoro_count": snapshot.pomodoro_count,
        }
        if snapshot.break_kind:
            payload["break_kind"] = snapshot.break_kind
        if accepted is not None:
            payload["accepted"] = accepted
        if reason:
            payload["reason"] = reason
        if message:
            payload["message"] = message
        self.publish(EVENT_TIMER, **payload)

    def publish_stats(self, settings: Settings, stats: Stats) -> None:
        self.publish(
            EVENT_STATS,
            settings=settings.to_document(),
            stats=stats.to_document(),
        )

    def publish_sync(self, sync_error: Optional[str]) -> None:
        payload: dict[str, Any] = {"ok": sync_error is None}
        if sync_error:
            payload["error"] = sync_error
        self.publish(EVENT_SYNC, **payload)

    def publish_suggestions(
        self,
        text: str,
        *,
        completion: str,
        suggestions: Sequence[CommandSpec],
    ) -> None:
        self.publish(
            EVENT_SUGGESTIONS,
            text=text,
            completion=completion,
            suggestions=[
                {
                    "command": spec.command,
                    "description": spec.description,
                    "usage": spec.usage,
                }
                for spec in suggestions
            ],
        )
