"""Immutable settings, stats, and session record values with document codecs.

Store documents use the camelCase keys of the persisted layout; the dataclasses
use snake_case. Every mutation builds a new value with ``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .constants import (
    DEFAULT_BREAK_SECONDS,
    DEFAULT_LONG_BREAK_SECONDS,
    DEFAULT_WORK_SECONDS,
    SESSION_NAME_FOCUS,
    THEME_DARK,
    THEMES,
)


@dataclass(frozen=True)
class Settings:
    """Per-user timer preferences."""
    work_duration: int = DEFAULT_WORK_SECONDS
    break_duration: int = DEFAULT_BREAK_SECONDS
    long_break_duration: int = DEFAULT_LONG_BREAK_SECONDS
    theme: str = THEME_DARK
    sound_enabled: bool = True
    session_name: str = SESSION_NAME_FOCUS

    def to_document(self) -> dict[str, Any]:
        return {
            "workDuration": self.work_duration,
            "breakDuration": self.break_duration,
            "longBreakDuration": self.long_break_duration,
            "theme": self.theme,
            "soundEnabled": self.sound_enabled,
            "sessionName": self.session_name,
        }

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> "Settings":
        defaults = cls()
        theme = str(raw.get("theme", defaults.theme))
        return cls(
            work_duration=int(raw.get("workDuration", defaults.work_duration)),
            break_duration=int(raw.get("breakDuration", defaults.break_duration)),
            long_break_duration=int(
                raw.get("longBreakDuration", defaults.long_break_duration)
            ),
            theme=theme if theme in THEMES else defaults.theme,
            sound_enabled=bool(raw.get("soundEnabled", defaults.sound_enabled)),
            session_name=str(raw.get("sessionName", defaults.session_name)),
        )


@dataclass(frozen=True)
class SessionRecord:
    """One completed or committed phase; never modified after creation."""
    session_name: str
    is_break: bool
    timestamp: str
    duration_minutes: int
    commit_message: Optional[str] = None

    def to_document(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "sessionName": self.session_name,
            "isBreak": self.is_break,
            "timestamp": self.timestamp,
            "durationMinutes": self.duration_minutes,
        }
        if self.commit_message is not None:
            payload["commitMessage"] = self.commit_message
        return payload

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> "SessionRecord":
        commit_message = raw.get("commitMessage")
        return cls(
            session_name=str(raw.get("sessionName", "")),
            is_break=bool(raw.get("isBreak", False)),
            timestamp=str(raw.get("timestamp", "")),
            duration_minutes=int(raw.get("durationMinutes", 0)),
            commit_message=str(commit_message) if commit_message is not None else None,
        )


@dataclass(frozen=True)
class Stats:
    """Cumulative ledger values; ``history`` is oldest-first."""
    completed_today: int = 0
    total_focus_time: int = 0
    current_streak: int = 0
    longest_streak: int = 0
    history: tuple[SessionRecord, ...] = field(default_factory=tuple)

    def to_document(self) -> dict[str, Any]:
        return {
            "completedToday": self.completed_today,
            "totalFocusTime": self.total_focus_time,
            "currentStreak": self.current_streak,
            "longestStreak": self.longest_streak,
            "history": [record.to_document() for record in self.history],
        }

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> "Stats":
        history_raw = raw.get("history") or []
        return cls(
            completed_today=int(raw.get("completedToday", 0)),
            total_focus_time=int(raw.get("totalFocusTime", 0)),
            current_streak=int(raw.get("currentStreak", 0)),
            longest_streak=int(raw.get("longestStreak", 0)),
            history=tuple(
                SessionRecord.from_document(item)
                for item in history_raw
                if isinstance(item, Mapping)
            ),
        )


@dataclass(frozen=True)
class UserProfile:
    """Identity fields stored next to settings and stats."""
    uid: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""

    @property
    def display_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


@dataclass(frozen=True)
class TimerState:
    """Transient clock state; rebuilt from settings on every session start."""
    current_time: int
    total_time: int
    is_running: bool = False
    is_break: bool = False
    pomodoro_count: int = 0

    @property
    def elapsed_seconds(self) -> int:
        return self.total_time - self.current_time


@dataclass(frozen=True)
class UserDocument:
    """One user's persisted document: identity, settings, stats, timestamps."""
    profile: UserProfile
    settings: Settings = field(default_factory=Settings)
    stats: Stats = field(default_factory=Stats)
    created_at: str = ""
    updated_at: str = ""
    last_activity: str = ""

    def to_document(self) -> dict[str, Any]:
        return {
            "uid": self.profile.uid,
            "email": self.profile.email,
            "firstName": self.profile.first_name,
            "lastName": self.profile.last_name,
            "settings": self.settings.to_document(),
            "stats": self.stats.to_document(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "lastActivity": self.last_activity,
        }

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> "UserDocument":
        settings_raw = raw.get("settings")
        stats_raw = raw.get("stats")
        return cls(
            profile=UserProfile(
                uid=str(raw.get("uid", "")),
                email=str(raw.get("email", "")),
                first_name=str(raw.get("firstName", "")),
                last_name=str(raw.get("lastName", "")),
            ),
            settings=Settings.from_document(
                settings_raw if isinstance(settings_raw, Mapping) else {}
            ),
            stats=Stats.from_document(stats_raw if isinstance(stats_raw, Mapping) else {}),
            created_at=str(raw.get("createdAt", "")),
            updated_at=str(raw.get("updatedAt", "")),
            last_activity=str(raw.get("lastActivity", "")),
        )
