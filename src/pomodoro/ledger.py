"""Session ledger: cumulative statistics derived from completed phases."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import Callable, Optional

from .constants import (
    HISTORY_LIMIT,
    MAX_COMPLETED_TODAY,
    MAX_RECORD_MINUTES,
    PHASE_BREAK,
    PHASE_WORK,
)
from .contracts import StateSinkLike
from .models import SessionRecord, Settings, Stats, TimerState


class SessionLedger:
    """Builds session records and replaces the stats value on every change."""

    def __init__(
        self,
        sink: StateSinkLike,
        *,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        self._sink = sink
        self._logger = logger or logging.getLogger("ledger")
        self._now = now_fn or (lambda: datetime.now(timezone.utc))

    def record(
        self,
        phase_type: str,
        *,
        settings: Settings,
        state: TimerState,
    ) -> SessionRecord:
        """Log a completed phase; work phases also advance the counters."""
        session_record = SessionRecord(
            session_name=settings.session_name,
            is_break=phase_type == PHASE_BREAK,
            timestamp=self._timestamp(),
            duration_minutes=_clamp_minutes(state.total_time // 60),
        )
        stats = self._sink.stats
        if phase_type == PHASE_WORK:
            current_streak = stats.current_streak + 1
            stats = replace(
                stats,
                completed_today=min(MAX_COMPLETED_TODAY, stats.completed_today + 1),
                total_focus_time=stats.total_focus_time + settings.work_duration // 60,
                current_streak=current_streak,
                longest_streak=max(stats.longest_streak, current_streak),
            )

        self._sink.apply_stats(
            replace(stats, history=_append_history(stats.history, session_record))
        )
        self._sink.append_session_record(session_record)
        self._logger.info(
            "Recorded %s phase: session=%s minutes=%d",
            phase_type,
            session_record.session_name,
            session_record.duration_minutes,
        )
        return session_record

    def commit(
        self,
        message: str,
        *,
        settings: Settings,
        state: TimerState,
    ) -> SessionRecord:
        """Log a manual note for the elapsed part of the current phase."""
        session_record = SessionRecord(
            session_name=settings.session_name,
            is_break=state.is_break,
            timestamp=self._timestamp(),
            duration_minutes=_clamp_minutes(state.elapsed_seconds // 60),
            commit_message=message,
        )
        stats = self._sink.stats
        self._sink.apply_stats(
            replace(stats, history=_append_history(stats.history, session_record))
        )
        self._sink.append_session_record(session_record)
        self._logger.info(
            "Committed note: session=%s minutes=%d",
            session_record.session_name,
            session_record.duration_minutes,
        )
        return session_record

    def break_streak(self) -> bool:
        """Reset the current streak; returns False when it was already zero."""
        stats = self._sink.stats
        if stats.current_streak == 0:
            return False
        self._sink.apply_stats(replace(stats, current_streak=0))
        self._logger.info("Streak reset after abandoned work phase")
        return True

    def _timestamp(self) -> str:
        return self._now().isoformat()


def _append_history(
    history: tuple[SessionRecord, ...],
    session_record: SessionRecord,
) -> tuple[SessionRecord, ...]:
    return (*history, session_record)[-HISTORY_LIMIT:]


def _clamp_minutes(minutes: int) -> int:
    return max(0, min(MAX_RECORD_MINUTES, int(minutes)))
