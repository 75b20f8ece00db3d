"""Protocol for the asynchronous document store consumed by the sync controller."""

from __future__ import annotations

from typing import Callable, Optional, Protocol

from pomodoro import SessionRecord, Settings, Stats, UserDocument

DocumentListener = Callable[[Optional[UserDocument]], None]
Unsubscribe = Callable[[], None]


class StoreLike(Protocol):
    """Remote persistence API; every coroutine may raise ``StoreError``."""
    async def get_user_document(self, uid: str) -> Optional[UserDocument]:
        ...

    async def create_user_document(self, uid: str, seed: UserDocument) -> UserDocument:
        ...

    async def replace_settings(self, uid: str, settings: Settings) -> None:
        ...

    async def replace_stats(self, uid: str, stats: Stats) -> None:
        ...

    async def append_session_record(self, uid: str, record: SessionRecord) -> str:
        ...

    async def delete_user_document(self, uid: str) -> None:
        ...

    async def get_session_history(self, uid: str, limit: int = 50) -> list[SessionRecord]:
        ...

    def subscribe(self, uid: str, on_change: DocumentListener) -> Unsubscribe:
        ...
