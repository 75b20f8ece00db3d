"""Tick handlers that publish timer updates and completion notices."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from commands import LINE_SYSTEM, OutputEvent
from pomodoro import PomodoroTick
from pomodoro.constants import (
    ACTION_COMPLETED,
    ACTION_TICK,
    REASON_COMPLETED,
    REASON_TICK,
)

from .console import ConsoleRenderer
from .messages import completion_message
from .ui import RuntimeUIPublisher


@dataclass(frozen=True)
class TickDependencies:
    """Dependencies required for processing timer tick events."""
    logger: logging.Logger
    ui: RuntimeUIPublisher
    console: Optional[ConsoleRenderer]
    sound_enabled: Callable[[], bool]
    publish_idle_state: Callable[[], None]
    on_completed: Callable[[], None]


class TickProcessor:
    """Handles tick side effects such as UI updates and the completion chime."""
    def __init__(self, dependencies: TickDependencies):
        self._dependencies = dependencies

    def handle_tick(self, tick: PomodoroTick) -> None:
        deps = self._dependencies
        if not tick.completed:
            deps.ui.publish_timer_update(
                tick.snapshot,
                action=ACTION_TICK,
                accepted=True,
                reason=REASON_TICK,
            )
            return

        message = completion_message(tick.completed_phase or "")
        deps.logger.info("Phase completed: %s", tick.completed_phase)
        deps.ui.publish_timer_update(
            tick.snapshot,
            action=ACTION_COMPLETED,
            accepted=True,
            reason=REASON_COMPLETED,
            message=message,
        )
        events = (OutputEvent(LINE_SYSTEM, message),)
        deps.ui.publish_output(events)
        if deps.console is not None:
            deps.console.render(events)
            if deps.sound_enabled():
                deps.console.bell()
        deps.on_completed()
        deps.publish_idle_state()
