"""Protocols describing the configuration the runtime reads."""

from __future__ import annotations

from typing import Protocol


class CommandSettingsLike(Protocol):
    """Subset of command settings used to build the interpreter."""
    rate_limit_max: int
    rate_limit_window_seconds: float
    confirm_reset_ttl_seconds: float
    logout_delay_seconds: float
    reset_reload_delay_seconds: float


class AppConfigLike(Protocol):
    """Subset of app configuration required by the runtime engine."""
    commands: CommandSettingsLike
