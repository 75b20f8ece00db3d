from .contracts import StateSinkLike
from .ledger import SessionLedger
from .models import SessionRecord, Settings, Stats, TimerState, UserDocument, UserProfile
from .service import (
    PomodoroAction,
    PomodoroActionResult,
    PomodoroPhase,
    PomodoroSnapshot,
    PomodoroTick,
    PomodoroTimer,
    break_kind,
    derive_phase_duration,
)

__all__ = [
    "PomodoroAction",
    "PomodoroActionResult",
    "PomodoroPhase",
    "PomodoroSnapshot",
    "PomodoroTick",
    "PomodoroTimer",
    "SessionLedger",
    "SessionRecord",
    "Settings",
    "StateSinkLike",
    "Stats",
    "TimerState",
    "UserDocument",
    "UserProfile",
    "break_kind",
    "derive_phase_duration",
]
