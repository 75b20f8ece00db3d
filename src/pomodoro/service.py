"""Work/break phase state machine driven by one-second ticks."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Literal, Optional

from .constants import (
    ACTION_COMPLETE,
    ACTION_PAUSE,
    ACTION_RESET,
    ACTION_SET_DURATIONS,
    ACTION_SET_SESSION,
    ACTION_SET_SOUND,
    ACTION_SET_THEME,
    ACTION_START,
    BREAK_LONG,
    BREAK_SHORT,
    LONG_BREAK_INTERVAL,
    PHASE_BREAK,
    PHASE_WORK,
    REASON_ALREADY_RUNNING,
    REASON_COMPLETED,
    REASON_NOT_RUNNING,
    REASON_NOT_STARTED,
    REASON_PAUSED,
    REASON_RESET,
    REASON_RESUMED,
    REASON_STARTED,
    REASON_UPDATED,
    SESSION_NAME_FOCUS,
    SESSION_NAME_LONG_BREAK,
    SESSION_NAME_SHORT_BREAK,
    THEME_DARK,
    THEME_LIGHT,
)
from .contracts import StateSinkLike
from .ledger import SessionLedger
from .models import SessionRecord, Settings, TimerState

PomodoroPhase = Literal["work", "break"]
PomodoroAction = Literal[
    "start",
    "pause",
    "reset",
    "complete",
    "set_durations",
    "set_session",
    "set_theme",
    "set_sound",
]


def derive_phase_duration(settings: Settings, is_break: bool, pomodoro_count: int) -> int:
    """Return the configured length in seconds of the phase described."""
    if not is_break:
        return settings.work_duration
    if break_kind(is_break, pomodoro_count) == BREAK_LONG:
        return settings.long_break_duration
    return settings.break_duration


def break_kind(is_break: bool, pomodoro_count: int) -> Optional[str]:
    if not is_break:
        return None
    if pomodoro_count > 0 and pomodoro_count % LONG_BREAK_INTERVAL == 0:
        return BREAK_LONG
    return BREAK_SHORT


@dataclass(frozen=True)
class PomodoroSnapshot:
    """Immutable timer snapshot exposed to the interpreter and UI publishers."""
    phase: PomodoroPhase
    break_kind: Optional[str]
    session: str
    is_running: bool
    duration_seconds: int
    remaining_seconds: int
    pomodoro_count: int

    @property
    def elapsed_seconds(self) -> int:
        return self.duration_seconds - self.remaining_seconds


@dataclass(frozen=True)
class PomodoroActionResult:
    """Result envelope returned after applying a timer action."""
    action: PomodoroAction
    accepted: bool
    reason: str
    snapshot: PomodoroSnapshot
    record: Optional[SessionRecord] = None


@dataclass(frozen=True)
class PomodoroTick:
    """Tick payload emitted for every elapsed second while running."""
    snapshot: PomodoroSnapshot
    completed: bool = False
    completed_phase: Optional[PomodoroPhase] = None
    record: Optional[SessionRecord] = None


class PomodoroTimer:
    """Single-threaded pomodoro state machine over a settings/stats sink."""

    def __init__(
        self,
        sink: StateSinkLike,
        *,
        ledger: Optional[SessionLedger] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._sink = sink
        self._ledger = ledger or SessionLedger(sink)
        self._logger = logger or logging.getLogger("pomodoro")
        self._state = self._fresh_state()

    @property
    def state(self) -> TimerState:
        return self._state

    def snapshot(self) -> PomodoroSnapshot:
        state = self._state
        return PomodoroSnapshot(
            phase=PHASE_BREAK if state.is_break else PHASE_WORK,
            break_kind=break_kind(state.is_break, state.pomodoro_count),
            session=self._sink.settings.session_name,
            is_running=state.is_running,
            duration_seconds=state.total_time,
            remaining_seconds=state.current_time,
            pomodoro_count=state.pomodoro_count,
        )

    def start(self) -> PomodoroActionResult:
        state = self._state
        if state.is_running:
            return self._result(ACTION_START, False, REASON_ALREADY_RUNNING)

        resuming = 0 < state.current_time < state.total_time
        if state.current_time == 0:
            duration = self._derive(state.is_break, state.pomodoro_count)
            state = replace(state, current_time=duration, total_time=duration)
        self._state = replace(state, is_running=True)
        self._logger.info(
            "Pomodoro %s: session=%s remaining=%ss",
            "resumed" if resuming else "started",
            self._sink.settings.session_name,
            self._state.current_time,
        )
        return self._result(
            ACTION_START,
            True,
            REASON_RESUMED if resuming else REASON_STARTED,
        )

    def pause(self) -> PomodoroActionResult:
        if not self._state.is_running:
            self._logger.debug("Pause ignored: timer not running")
            return self._result(ACTION_PAUSE, False, REASON_NOT_RUNNING)

        self._state = replace(self._state, is_running=False)
        self._logger.info(
            "Pomodoro paused: session=%s remaining=%ss",
            self._sink.settings.session_name,
            self._state.current_time,
        )
        return self._result(ACTION_PAUSE, True, REASON_PAUSED)

    def reset(self) -> PomodoroActionResult:
        state = self._state
        if not state.is_break and state.elapsed_seconds > 0:
            self._ledger.break_streak()
        self._reload_clock()
        self._logger.info("Pomodoro reset: remaining=%ss", self._state.current_time)
        return self._result(ACTION_RESET, True, REASON_RESET)

    def complete(self) -> PomodoroActionResult:
        """Finish the current phase early; refused for an untouched phase."""
        state = self._state
        if not state.is_running and state.current_time == state.total_time:
            self._logger.debug("Complete ignored: phase not started")
            return self._result(ACTION_COMPLETE, False, REASON_NOT_STARTED)

        record = self._complete_phase()
        return self._result(ACTION_COMPLETE, True, REASON_COMPLETED, record=record)

    def commit(self, message: str) -> SessionRecord:
        return self._ledger.commit(message, settings=self._sink.settings, state=self._state)

    def tick(self) -> Optional[PomodoroTick]:
        """Advance one second; returns None when the clock is stopped."""
        state = self._state
        if not state.is_running:
            return None

        remaining = max(0, state.current_time - 1)
        self._state = replace(state, current_time=remaining)
        if remaining > 0:
            return PomodoroTick(snapshot=self.snapshot())

        completed_phase: PomodoroPhase = PHASE_BREAK if state.is_break else PHASE_WORK
        record = self._complete_phase()
        return PomodoroTick(
            snapshot=self.snapshot(),
            completed=True,
            completed_phase=completed_phase,
            record=record,
        )

    def set_durations(
        self,
        *,
        work: Optional[int] = None,
        short_break: Optional[int] = None,
        long_break: Optional[int] = None,
    ) -> PomodoroActionResult:
        """Update phase lengths given in minutes."""
        settings = self._sink.settings
        updated = replace(
            settings,
            work_duration=work * 60 if work else settings.work_duration,
            break_duration=short_break * 60 if short_break else settings.break_duration,
            long_break_duration=(
                long_break * 60 if long_break else settings.long_break_duration
            ),
        )
        self._sink.apply_settings(updated)
        if not self._state.is_running:
            self._reload_clock()
        self._logger.info(
            "Durations set: work=%ss break=%ss long=%ss",
            updated.work_duration,
            updated.break_duration,
            updated.long_break_duration,
        )
        return self._result(ACTION_SET_DURATIONS, True, REASON_UPDATED)

    def set_session_name(self, name: str) -> PomodoroActionResult:
        self._sink.apply_settings(replace(self._sink.settings, session_name=name))
        if not self._state.is_running:
            self._reload_clock()
        self._logger.info("Session renamed: %s", name)
        return self._result(ACTION_SET_SESSION, True, REASON_UPDATED)

    def set_theme(self, theme: Optional[str] = None) -> PomodoroActionResult:
        settings = self._sink.settings
        if theme is None:
            theme = THEME_LIGHT if settings.theme == THEME_DARK else THEME_DARK
        self._sink.apply_settings(replace(settings, theme=theme))
        return self._result(ACTION_SET_THEME, True, REASON_UPDATED)

    def set_sound(self, enabled: Optional[bool] = None) -> PomodoroActionResult:
        settings = self._sink.settings
        if enabled is None:
            enabled = not settings.sound_enabled
        self._sink.apply_settings(replace(settings, sound_enabled=enabled))
        return self._result(ACTION_SET_SOUND, True, REASON_UPDATED)

    def resync(self) -> bool:
        """Re-derive a stopped clock after settings were replaced from outside."""
        state = self._state
        if state.is_running:
            return False
        duration = self._derive(state.is_break, state.pomodoro_count)
        if duration == state.total_time:
            return False
        self._state = replace(state, current_time=duration, total_time=duration)
        self._logger.debug("Clock re-derived after settings change: %ss", duration)
        return True

    def discard(self) -> None:
        """Drop all transient state, as on logout."""
        self._state = self._fresh_state()

    def _complete_phase(self) -> SessionRecord:
        state = self._state
        settings = self._sink.settings
        phase_type = PHASE_BREAK if state.is_break else PHASE_WORK
        record = self._ledger.record(phase_type, settings=settings, state=state)

        if state.is_break:
            pomodoro_count = state.pomodoro_count
            next_session = SESSION_NAME_FOCUS
        else:
            pomodoro_count = state.pomodoro_count + 1
            next_session = (
                SESSION_NAME_LONG_BREAK
                if pomodoro_count % LONG_BREAK_INTERVAL == 0
                else SESSION_NAME_SHORT_BREAK
            )
        next_settings = replace(self._sink.settings, session_name=next_session)
        self._sink.apply_settings(next_settings)

        is_break = not state.is_break
        duration = derive_phase_duration(next_settings, is_break, pomodoro_count)
        self._state = TimerState(
            current_time=duration,
            total_time=duration,
            is_running=False,
            is_break=is_break,
            pomodoro_count=pomodoro_count,
        )
        self._logger.info(
            "Pomodoro %s phase completed: next=%s duration=%ss count=%d",
            phase_type,
            next_session,
            duration,
            pomodoro_count,
        )
        return record

    def _reload_clock(self) -> None:
        state = self._state
        duration = self._derive(state.is_break, state.pomodoro_count)
        self._state = replace(
            state,
            current_time=duration,
            total_time=duration,
            is_running=False,
        )

    def _fresh_state(self) -> TimerState:
        duration = self._derive(False, 0)
        return TimerState(current_time=duration, total_time=duration)

    def _derive(self, is_break: bool, pomodoro_count: int) -> int:
        return derive_phase_duration(self._sink.settings, is_break, pomodoro_count)

    def _result(
        self,
        action: PomodoroAction,
        accepted: bool,
        reason: str,
        *,
        record: Optional[SessionRecord] = None,
    ) -> PomodoroActionResult:
        return PomodoroActionResult(
            action=action,
            accepted=accepted,
            reason=reason,
            snapshot=self.snapshot(),
            record=record,
        )
