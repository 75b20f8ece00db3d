"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.toml"
DEFAULT_SQLITE_FILE = "pomodoro.sqlite3"

STORE_BACKEND_MEMORY = "memory"
STORE_BACKEND_SQLITE = "sqlite"
STORE_BACKENDS = (STORE_BACKEND_MEMORY, STORE_BACKEND_SQLITE)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class ProfileSettings:
    """Signed-in user identity from `[profile]`."""
    uid: str
    email: str = ""
    first_name: str = ""
    last_name: str = ""


@dataclass(frozen=True)
class TimerSettings:
    """Phase lengths in minutes seeded into new user documents, from `[timer]`."""
    work_minutes: int = 25
    break_minutes: int = 5
    long_break_minutes: int = 15


@dataclass(frozen=True)
class StoreSettings:
    """Persistence backend selection from `[store]`."""
    backend: str = STORE_BACKEND_MEMORY
    path: str = ""
    history_limit: int = 100


@dataclass(frozen=True)
class CommandSettings:
    """Interpreter limits and delays from `[commands]`."""
    rate_limit_max: int = 20
    rate_limit_window_seconds: float = 60.0
    confirm_reset_ttl_seconds: float = 30.0
    logout_delay_seconds: float = 0.5
    reset_reload_delay_seconds: float = 3.0


@dataclass(frozen=True)
class UIServerSettings:
    """Websocket UI server settings from `[ui_server]`."""
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    profile: ProfileSettings
    timer: TimerSettings
    store: StoreSettings
    commands: CommandSettings
    ui_server: UIServerSettings
    logging: LoggingSettings
    source_file: str
