"""Status and completion text builders for the running timer."""

from __future__ import annotations

from pomodoro import PomodoroSnapshot
from pomodoro.constants import PHASE_WORK


def format_duration(seconds: int) -> str:
    """Format a duration in seconds as `MM:SS`."""
    minutes, remainder = divmod(max(0, int(seconds)), 60)
    return f"{minutes:02d}:{remainder:02d}"


def timer_status_message(snapshot: PomodoroSnapshot) -> str:
    """Build one-line status text for the current timer snapshot."""
    remaining = format_duration(snapshot.remaining_seconds)
    if snapshot.is_running:
        return f"{snapshot.session} running ({remaining} remaining)"
    if snapshot.remaining_seconds < snapshot.duration_seconds:
        return f"{snapshot.session} paused ({remaining} remaining)"
    return f"Ready: {snapshot.session} ({remaining})"


def completion_message(completed_phase: str) -> str:
    if completed_phase == PHASE_WORK:
        return "[DONE] Work session complete! Time for a break."
    return "[DONE] Break's over! Ready to focus?"
