"""Document stores with store-side validation and live change subscriptions."""

from __future__ import annotations

import asyncio
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pomodoro import SessionRecord, Settings, Stats, UserDocument
from pomodoro.constants import (
    MAX_COMMIT_MESSAGE_LENGTH,
    MAX_COMPLETED_TODAY,
    MAX_RECORD_MINUTES,
    MAX_SESSION_NAME_LENGTH,
    THEMES,
)

from .contracts import DocumentListener, Unsubscribe
from .errors import StoreNotFoundError, StoreWriteError

DEFAULT_SESSION_HISTORY_LIMIT = 100
MAX_DURATION_SECONDS = 1440 * 60
MAX_STORED_HISTORY = 100


def check_settings(settings: Settings) -> None:
    if not (
        0 < settings.work_duration <= MAX_DURATION_SECONDS
        and 0 < settings.break_duration <= MAX_DURATION_SECONDS
        and 0 < settings.long_break_duration <= MAX_DURATION_SECONDS
        and settings.theme in THEMES
        and isinstance(settings.sound_enabled, bool)
        and len(settings.session_name) <= MAX_SESSION_NAME_LENGTH
    ):
        raise StoreWriteError("Invalid settings data")


def check_stats(stats: Stats) -> None:
    if not (
        0 <= stats.completed_today <= MAX_COMPLETED_TODAY
        and len(stats.history) <= MAX_STORED_HISTORY
        and stats.total_focus_time >= 0
        and stats.longest_streak >= 0
        and stats.current_streak >= 0
    ):
        raise StoreWriteError("Invalid stats data")


def check_session_record(record: SessionRecord) -> None:
    if (
        len(record.session_name) > MAX_SESSION_NAME_LENGTH
        or len(record.commit_message or "") > MAX_COMMIT_MESSAGE_LENGTH
        or not 0 <= record.duration_minutes <= MAX_RECORD_MINUTES
    ):
        raise StoreWriteError("Invalid session data")


class DocumentStore:
    """Shared async store behaviour over synchronous raw-document primitives.

    Subclasses implement the ``_load``/``_save``/``_delete`` and session
    primitives; ``_call`` decides where they run. Change notifications are
    delivered on the event loop after the write completes, never inline.
    """

    def __init__(
        self,
        *,
        history_limit: int = DEFAULT_SESSION_HISTORY_LIMIT,
        logger: Optional[logging.Logger] = None,
        now_fn: Optional[Callable[[], datetime]] = None,
    ):
        if history_limit <= 0:
            raise ValueError("history_limit must be greater than zero")
        self._history_limit = history_limit
        self._logger = logger or logging.getLogger("store")
        self._now = now_fn or (lambda: datetime.now(timezone.utc))
        self._subscribers: dict[str, list[DocumentListener]] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._locks: dict[str, asyncio.Lock] = {}

    async def get_user_document(self, uid: str) -> Optional[UserDocument]:
        async with self._lock(uid):
            raw = await self._call(self._load, uid)
            if raw is None:
                return None
            raw["lastActivity"] = self._timestamp()
            await self._call(self._save, uid, raw)
        return UserDocument.from_document(raw)

    async def create_user_document(self, uid: str, seed: UserDocument) -> UserDocument:
        check_settings(seed.settings)
        check_stats(seed.stats)
        now = self._timestamp()
        raw = seed.to_document()
        raw.update(uid=uid, createdAt=now, updatedAt=now, lastActivity=now)
        async with self._lock(uid):
            await self._call(self._save, uid, raw)
            self._logger.info("Created user document: uid=%s", uid)
            await self._notify(uid)
        return UserDocument.from_document(raw)

    async def replace_settings(self, uid: str, settings: Settings) -> None:
        check_settings(settings)
        await self._replace_field(uid, "settings", settings.to_document())

    async def replace_stats(self, uid: str, stats: Stats) -> None:
        check_stats(stats)
        await self._replace_field(uid, "stats", stats.to_document())

    async def append_session_record(self, uid: str, record: SessionRecord) -> str:
        check_session_record(record)
        record_id = uuid.uuid4().hex
        payload = {**record.to_document(), "id": record_id, "createdAt": self._timestamp()}
        async with self._lock(uid):
            if await self._call(self._load, uid) is None:
                raise StoreNotFoundError(f"No user document for uid={uid}")
            await self._call(self._insert_session, uid, record_id, payload)
            await self._call(self._trim_sessions, uid, self._history_limit)
        return record_id

    async def delete_user_document(self, uid: str) -> None:
        async with self._lock(uid):
            await self._call(self._delete, uid)
            self._logger.info("Deleted user document and sessions: uid=%s", uid)
            await self._notify(uid)

    async def get_session_history(self, uid: str, limit: int = 50) -> list[SessionRecord]:
        actual_limit = max(0, min(limit, self._history_limit))
        rows = await self._call(self._list_sessions, uid, actual_limit)
        return [SessionRecord.from_document(row) for row in rows]

    def subscribe(self, uid: str, on_change: DocumentListener) -> Unsubscribe:
        """Register a listener; it first receives the current document."""
        self._subscribers.setdefault(uid, []).append(on_change)
        task = asyncio.ensure_future(self._deliver_initial(uid, on_change))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        def unsubscribe() -> None:
            listeners = self._subscribers.get(uid, [])
            if on_change in listeners:
                listeners.remove(on_change)

        return unsubscribe

    async def _replace_field(self, uid: str, key: str, value: dict[str, Any]) -> None:
        async with self._lock(uid):
            raw = await self._call(self._load, uid)
            if raw is None:
                raise StoreNotFoundError(f"No user document for uid={uid}")
            now = self._timestamp()
            raw[key] = value
            raw["updatedAt"] = now
            raw["lastActivity"] = now
            await self._call(self._save, uid, raw)
            await self._notify(uid)

    def _lock(self, uid: str) -> asyncio.Lock:
        """Serializes writes and their pushes for one user document."""
        lock = self._locks.get(uid)
        if lock is None:
            lock = self._locks[uid] = asyncio.Lock()
        return lock

    async def _deliver_initial(self, uid: str, listener: DocumentListener) -> None:
        raw = await self._call(self._load, uid)
        self._deliver(uid, listener, UserDocument.from_document(raw) if raw else None)

    async def _notify(self, uid: str) -> None:
        listeners = tuple(self._subscribers.get(uid, ()))
        if not listeners:
            return
        raw = await self._call(self._load, uid)
        loop = asyncio.get_running_loop()
        for listener in listeners:
            document = UserDocument.from_document(raw) if raw else None
            loop.call_soon(self._deliver, uid, listener, document)

    def _deliver(
        self,
        uid: str,
        listener: DocumentListener,
        document: Optional[UserDocument],
    ) -> None:
        if listener not in self._subscribers.get(uid, ()):
            return
        try:
            listener(document)
        except Exception as error:
            self._logger.error("Store listener failed: %s", error, exc_info=True)

    def _timestamp(self) -> str:
        return self._now().isoformat()

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        raise NotImplementedError

    def _load(self, uid: str) -> Optional[dict[str, Any]]:
        raise NotImplementedError

    def _save(self, uid: str, raw: dict[str, Any]) -> None:
        raise NotImplementedError

    def _delete(self, uid: str) -> None:
        raise NotImplementedError

    def _insert_session(self, uid: str, record_id: str, payload: dict[str, Any]) -> None:
        raise NotImplementedError

    def _trim_sessions(self, uid: str, keep: int) -> None:
        raise NotImplementedError

    def _list_sessions(self, uid: str, limit: int) -> list[dict[str, Any]]:
        raise NotImplementedError


class InMemoryStore(DocumentStore):
    """Process-local store; documents are deep-copied across the API boundary."""

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self._documents: dict[str, dict[str, Any]] = {}
        self._sessions: dict[str, dict[str, dict[str, Any]]] = {}

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        return fn(*args)

    def _load(self, uid: str) -> Optional[dict[str, Any]]:
        raw = self._documents.get(uid)
        return copy.deepcopy(raw) if raw is not None else None

    def _save(self, uid: str, raw: dict[str, Any]) -> None:
        self._documents[uid] = copy.deepcopy(raw)

    def _delete(self, uid: str) -> None:
        self._documents.pop(uid, None)
        self._sessions.pop(uid, None)

    def _insert_session(self, uid: str, record_id: str, payload: dict[str, Any]) -> None:
        self._sessions.setdefault(uid, {})[record_id] = copy.deepcopy(payload)

    def _trim_sessions(self, uid: str, keep: int) -> None:
        sessions = self._sessions.get(uid, {})
        while len(sessions) > keep:
            sessions.pop(next(iter(sessions)))

    def _list_sessions(self, uid: str, limit: int) -> list[dict[str, Any]]:
        rows = list(self._sessions.get(uid, {}).values())
        rows.reverse()
        return copy.deepcopy(rows[:limit])
