"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    DEFAULT_SQLITE_FILE,
    LOG_LEVELS,
    STORE_BACKEND_SQLITE,
    STORE_BACKENDS,
    AppConfig,
    AppConfigurationError,
    CommandSettings,
    LoggingSettings,
    ProfileSettings,
    StoreSettings,
    TimerSettings,
    UIServerSettings,
)

MAX_TIMER_MINUTES = 1440
MAX_STORE_HISTORY = 100


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    return AppConfig(
        profile=_parse_profile_settings(_section(raw, "profile")),
        timer=_parse_timer_settings(_section(raw, "timer")),
        store=_parse_store_settings(_section(raw, "store"), base_dir=base_dir),
        commands=_parse_command_settings(_section(raw, "commands")),
        ui_server=_parse_ui_server_settings(_section(raw, "ui_server")),
        logging=_parse_logging_settings(_section(raw, "logging")),
        source_file=source_file,
    )


def _parse_profile_settings(section: Mapping[str, Any]) -> ProfileSettings:
    return ProfileSettings(
        uid=_required_str(section, "uid", "profile"),
        email=_as_str(section.get("email", ""), "profile.email"),
        first_name=_as_str(section.get("first_name", ""), "profile.first_name"),
        last_name=_as_str(section.get("last_name", ""), "profile.last_name"),
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    return TimerSettings(
        work_minutes=_as_minutes(section.get("work_minutes", 25), "timer.work_minutes"),
        break_minutes=_as_minutes(
            section.get("break_minutes", 5),
            "timer.break_minutes",
        ),
        long_break_minutes=_as_minutes(
            section.get("long_break_minutes", 15),
            "timer.long_break_minutes",
        ),
    )


def _parse_store_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> StoreSettings:
    backend = _as_str(section.get("backend", "memory"), "store.backend").lower()
    if backend not in STORE_BACKENDS:
        allowed = ", ".join(STORE_BACKENDS)
        raise AppConfigurationError(f"store.backend must be one of: {allowed}")

    path = _as_str(section.get("path", ""), "store.path")
    if backend == STORE_BACKEND_SQLITE and not path:
        path = DEFAULT_SQLITE_FILE

    history_limit = _as_int(section.get("history_limit", 100), "store.history_limit")
    if not 1 <= history_limit <= MAX_STORE_HISTORY:
        raise AppConfigurationError(
            f"store.history_limit must be in [1, {MAX_STORE_HISTORY}]."
        )
    return StoreSettings(
        backend=backend,
        path=_resolve_path(base_dir, path),
        history_limit=history_limit,
    )


def _parse_command_settings(section: Mapping[str, Any]) -> CommandSettings:
    rate_limit_max = _as_int(section.get("rate_limit_max", 20), "commands.rate_limit_max")
    if rate_limit_max <= 0:
        raise AppConfigurationError("commands.rate_limit_max must be positive.")
    return CommandSettings(
        rate_limit_max=rate_limit_max,
        rate_limit_window_seconds=_as_positive_float(
            section.get("rate_limit_window_seconds", 60.0),
            "commands.rate_limit_window_seconds",
        ),
        confirm_reset_ttl_seconds=_as_positive_float(
            section.get("confirm_reset_ttl_seconds", 30.0),
            "commands.confirm_reset_ttl_seconds",
        ),
        logout_delay_seconds=_as_non_negative_float(
            section.get("logout_delay_seconds", 0.5),
            "commands.logout_delay_seconds",
        ),
        reset_reload_delay_seconds=_as_non_negative_float(
            section.get("reset_reload_delay_seconds", 3.0),
            "commands.reset_reload_delay_seconds",
        ),
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", False), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


def _parse_logging_settings(section: Mapping[str, Any]) -> LoggingSettings:
    level = _as_str(section.get("level", "INFO"), "logging.level").upper()
    if level not in LOG_LEVELS:
        allowed = ", ".join(LOG_LEVELS)
        raise AppConfigurationError(f"logging.level must be one of: {allowed}")
    return LoggingSettings(level=level)


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _required_str(section: Mapping[str, Any], field: str, section_name: str) -> str:
    value = section.get(field)
    text = _as_str(value, f"{section_name}.{field}")
    if not text:
        raise AppConfigurationError(f"{section_name}.{field} is required.")
    return text


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be a float.")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be a float.") from error
    raise AppConfigurationError(f"{field} must be a float.")


def _as_minutes(value: Any, field: str) -> int:
    minutes = _as_int(value, field)
    if not 1 <= minutes <= MAX_TIMER_MINUTES:
        raise AppConfigurationError(f"{field} must be in [1, {MAX_TIMER_MINUTES}].")
    return minutes


def _as_positive_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number <= 0:
        raise AppConfigurationError(f"{field} must be positive.")
    return number


def _as_non_negative_float(value: Any, field: str) -> float:
    number = _as_float(value, field)
    if number < 0:
        raise AppConfigurationError(f"{field} must not be negative.")
    return number


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
