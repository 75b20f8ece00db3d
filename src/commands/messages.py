"""Terminal text builders for command results."""

from __future__ import annotations

import datetime as dt
from typing import Optional

from contracts.command_contract import SET_TARGET_BREAK, SET_TARGET_WORK
from pomodoro import PomodoroActionResult, SessionRecord, Settings, Stats, UserProfile
from pomodoro.constants import (
    PHASE_WORK,
    REASON_ALREADY_RUNNING,
    REASON_NOT_RUNNING,
    REASON_NOT_STARTED,
    REASON_RESUMED,
    THEME_DARK,
)

from .catalog import COMMAND_CATALOG

RECENT_HISTORY_LINES = 5

RESET_DATA_WARNINGS: tuple[str, ...] = (
    "[WARNING] This will reset ALL your data including settings, statistics, and session history.",
    "This action cannot be undone and will affect your stored data.",
    "Type '/confirm-reset' to proceed or any other command to cancel.",
)


def format_focus_time(total_minutes: int) -> str:
    """Format a minute count as ``Xh Ym``."""
    hours, minutes = divmod(max(0, int(total_minutes)), 60)
    return f"{hours}h {minutes}m"


def start_text(result: PomodoroActionResult) -> str:
    if result.reason == REASON_RESUMED:
        return f'[RESUMED] Timer resumed for "{result.snapshot.session}"'
    return f'[STARTED] Timer started for "{result.snapshot.session}"'


def rejection_text(reason: str) -> str:
    if reason == REASON_ALREADY_RUNNING:
        return "[WARNING] Timer is already running."
    if reason == REASON_NOT_RUNNING:
        return "[WARNING] Timer is not running."
    if reason == REASON_NOT_STARTED:
        return "[WARNING] No active session to complete."
    return "[WARNING] That action is not possible right now."


def reset_text(result: PomodoroActionResult) -> str:
    return f"[RESET] Timer reset to {result.snapshot.duration_seconds // 60} minutes."


def complete_text(completed_phase: str) -> str:
    suffix = "Great focus session!" if completed_phase == PHASE_WORK else "Break finished!"
    return f"[COMPLETED] Session completed manually! {suffix}"


def commit_text(message: str) -> str:
    return f'[COMMIT] Commit logged: "{message}"'


def set_duration_text(target: str, minutes: int) -> str:
    if target == SET_TARGET_WORK:
        tag = "[WORK]"
    elif target == SET_TARGET_BREAK:
        tag = "[BREAK]"
    else:
        tag = "[LONG]"
    return f"{tag} {target.capitalize()} duration set to {minutes} minutes."


def session_text(name: str, *, clock_reset: bool) -> str:
    text = f'[SESSION] Session name set to: "{name}".'
    return f"{text} Timer reset." if clock_reset else text


def theme_text(theme: str) -> str:
    tag = "[DARK]" if theme == THEME_DARK else "[LIGHT]"
    return f"{tag} Theme set to {theme}."


def sound_text(enabled: bool) -> str:
    if enabled:
        return "[ON] Sound enabled."
    return "[OFF] Sound disabled."


def help_lines() -> list[str]:
    width = max(len(spec.signature) for spec in COMMAND_CATALOG)
    lines = ["Pomodoro CLI - Available Commands"]
    lines.extend(
        f"  {spec.signature.ljust(width)}  {spec.description}" for spec in COMMAND_CATALOG
    )
    lines.append("Tip: Use Tab for auto-completion.")
    return lines


def history_line(record: SessionRecord) -> str:
    tag = "[BREAK]" if record.is_break else "[WORK]"
    line = f"  {tag} [{_clock_time(record.timestamp)}] {record.session_name}"
    if record.commit_message:
        line += f" - {record.commit_message}"
    return line


def stats_lines(
    profile: Optional[UserProfile],
    settings: Settings,
    stats: Stats,
) -> list[str]:
    lines = ["[STATS] Statistics"]
    if profile is not None:
        name = profile.display_name or profile.uid
        lines.append(f"  [USER] {name} ({profile.email or 'no email'})")
    lines.extend(
        [
            f"  [SESSION] Current Session: {settings.session_name}",
            f"  [COUNT] Today's completed Pomodoros: {stats.completed_today}",
            f"  [TIME] Total focus time today: {format_focus_time(stats.total_focus_time)}",
            f"  [STREAK] Current streak: {stats.current_streak}",
            f"  [BEST] Longest streak: {stats.longest_streak}",
            "  [SETTINGS] Settings:",
            (
                f"    [SOUND] Sound: {'On' if settings.sound_enabled else 'Off'} | "
                f"[THEME] Theme: {settings.theme}"
            ),
        ]
    )
    if stats.history:
        lines.append("  [HISTORY] Recent sessions:")
        lines.extend(
            history_line(record) for record in stats.history[-RECENT_HISTORY_LINES:]
        )
    return lines


def _clock_time(timestamp: str) -> str:
    try:
        moment = dt.datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return "--:--"
    if moment.tzinfo is not None:
        moment = moment.astimezone()
    return moment.strftime("%H:%M")
