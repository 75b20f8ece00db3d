"""Protocols describing where the engine and ledger publish state changes."""

from __future__ import annotations

from typing import Any, Protocol

from .models import SessionRecord, Settings, Stats


class StateSinkLike(Protocol):
    """Holder of the current settings/stats that accepts whole-value replacements."""
    @property
    def settings(self) -> Settings:
        ...

    @property
    def stats(self) -> Stats:
        ...

    def apply_settings(self, settings: Settings) -> Any:
        ...

    def apply_stats(self, stats: Stats) -> Any:
        ...

    def append_session_record(self, record: SessionRecord) -> Any:
        ...
