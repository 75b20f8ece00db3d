from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Mapping

from app_config_parser import parse_app_config
from app_config_schema import (
    DEFAULT_CONFIG_FILE,
    AppConfig,
    AppConfigurationError,
    CommandSettings,
    LoggingSettings,
    ProfileSettings,
    StoreSettings,
    TimerSettings,
    UIServerSettings,
)

CONFIG_FILE_ENV = "APP_CONFIG_FILE"
USER_ID_ENV = "POMODORO_USER_ID"

__all__ = [
    "AppConfig",
    "AppConfigurationError",
    "CommandSettings",
    "LoggingSettings",
    "ProfileSettings",
    "StoreSettings",
    "TimerSettings",
    "UIServerSettings",
    "load_app_config",
    "resolve_config_path",
]


def resolve_config_path(config_path: str | None = None) -> Path:
    raw = config_path or os.getenv(CONFIG_FILE_ENV) or DEFAULT_CONFIG_FILE
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def load_app_config(
    config_path: str | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    path = resolve_config_path(config_path)
    if not path.exists():
        raise AppConfigurationError(f"Config file not found: {path}")
    if not path.is_file():
        raise AppConfigurationError(f"Config path is not a file: {path}")

    try:
        with open(path, "rb") as fh:
            raw = tomllib.load(fh)
    except Exception as error:
        raise AppConfigurationError(f"Failed to parse config TOML: {error}") from error

    if not isinstance(raw, Mapping):
        raise AppConfigurationError("Root config TOML object must be a table.")

    env = environ if environ is not None else os.environ
    uid_override = env.get(USER_ID_ENV, "").strip()
    if uid_override:
        profile = raw.get("profile")
        profile = dict(profile) if isinstance(profile, Mapping) else {}
        profile["uid"] = uid_override
        raw = {**raw, "profile": profile}

    return parse_app_config(raw, base_dir=path.parent, source_file=str(path))
