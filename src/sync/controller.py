"""Optimistic settings/stats synchronization against the document store."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Generic, Literal, Optional, TypeVar

from pomodoro import SessionRecord, Settings, Stats, UserDocument, UserProfile

from .contracts import StoreLike, Unsubscribe
from .errors import sanitize_error

T = TypeVar("T")

SyncStatus = Literal["applied", "rolled_back"]
SYNC_APPLIED = "applied"
SYNC_ROLLED_BACK = "rolled_back"

NoticeLevel = Literal["info", "warning", "error"]

StateListener = Callable[[Settings, Stats], None]


@dataclass(frozen=True)
class SyncOutcome(Generic[T]):
    """Result of one optimistic write: the value that is local afterwards."""
    status: SyncStatus
    value: T
    error: Optional[str] = None

    @property
    def applied(self) -> bool:
        return self.status == SYNC_APPLIED


@dataclass(frozen=True)
class SyncNotice:
    """User-facing sync condition waiting to be surfaced."""
    level: NoticeLevel
    message: str


def apply_with_sync(
    current: T,
    next_value: T,
    persist: Callable[[T], Awaitable[object]],
    *,
    read: Callable[[], T],
    assign: Callable[[T], None],
    on_outcome: Optional[Callable[[SyncOutcome[T]], None]] = None,
    logger: Optional[logging.Logger] = None,
) -> "asyncio.Task[SyncOutcome[T]]":
    """Assign ``next_value`` now and persist it in the background.

    On failure the previous value is restored, but only while the local value
    is still the one this call wrote; a newer write or a store push wins.
    """
    log = logger or logging.getLogger("sync")
    assign(next_value)

    async def _persist() -> SyncOutcome[T]:
        try:
            await persist(next_value)
        except Exception as error:
            log.warning("Persist failed, rolling back: %s", error)
            if read() is next_value:
                assign(current)
            outcome = SyncOutcome(SYNC_ROLLED_BACK, read(), error=sanitize_error(error))
        else:
            outcome = SyncOutcome(SYNC_APPLIED, next_value)
        if on_outcome is not None:
            on_outcome(outcome)
        return outcome

    return asyncio.ensure_future(_persist())


class SyncController:
    """Local settings/stats holder kept in step with one user's store document."""

    def __init__(
        self,
        store: StoreLike,
        profile: UserProfile,
        *,
        seed_settings: Optional[Settings] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._store = store
        self._profile: Optional[UserProfile] = profile
        self._seed_settings = seed_settings or Settings()
        self._logger = logger or logging.getLogger("sync")

        self._settings = self._seed_settings
        self._stats = Stats()
        self._sync_error: Optional[str] = None
        self._notices: list[SyncNotice] = []
        self._pending: set[asyncio.Task] = set()
        self._listeners: list[StateListener] = []
        self._unsubscribe: Optional[Unsubscribe] = None
        self._deferred_push: Optional[UserDocument] = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def stats(self) -> Stats:
        return self._stats

    @property
    def profile(self) -> Optional[UserProfile]:
        return self._profile

    @property
    def sync_error(self) -> Optional[str]:
        return self._sync_error

    @property
    def is_subscribed(self) -> bool:
        return self._unsubscribe is not None

    def add_listener(self, listener: StateListener) -> None:
        """Register a callback for local state replaced from outside a write."""
        self._listeners.append(listener)

    async def hydrate(self) -> UserDocument:
        """Load or create the user document, then follow its live feed."""
        profile = self._require_profile()
        document = await self._store.get_user_document(profile.uid)
        if document is None:
            self._logger.info("No document for uid=%s, creating defaults", profile.uid)
            document = await self._store.create_user_document(
                profile.uid,
                UserDocument(profile=profile, settings=self._seed_settings),
            )
        self._replace_local(document.settings, document.stats)
        if self._unsubscribe is None:
            self._unsubscribe = self._store.subscribe(profile.uid, self._on_remote_change)
        self._logger.info("Hydrated local state for uid=%s", profile.uid)
        return document

    async def refresh(self) -> bool:
        """Replace local state with the stored document; False when unavailable."""
        profile = self._require_profile()
        try:
            document = await self._store.get_user_document(profile.uid)
        except Exception as error:
            self._logger.warning("Refresh failed: %s", error)
            self._notices.append(
                SyncNotice("warning", f"Could not refresh from store: {sanitize_error(error)}")
            )
            return False
        if document is None:
            return False
        self._replace_local(document.settings, document.stats)
        return True

    def apply_settings(self, settings: Settings) -> Optional["asyncio.Task[SyncOutcome[Settings]]"]:
        if self._profile is None:
            self._settings = settings
            return None
        uid = self._profile.uid
        return self._track(
            apply_with_sync(
                self._settings,
                settings,
                lambda value: self._store.replace_settings(uid, value),
                read=lambda: self._settings,
                assign=self._assign_settings,
                on_outcome=self._handle_outcome,
                logger=self._logger,
            )
        )

    def apply_stats(self, stats: Stats) -> Optional["asyncio.Task[SyncOutcome[Stats]]"]:
        if self._profile is None:
            self._stats = stats
            return None
        uid = self._profile.uid
        return self._track(
            apply_with_sync(
                self._stats,
                stats,
                lambda value: self._store.replace_stats(uid, value),
                read=lambda: self._stats,
                assign=self._assign_stats,
                on_outcome=self._handle_outcome,
                logger=self._logger,
            )
        )

    def append_session_record(self, record: SessionRecord) -> Optional[asyncio.Task]:
        """Secondary write: failures are reported but never rolled back."""
        if self._profile is None:
            return None
        return self._track(asyncio.ensure_future(self._append_record(self._profile.uid, record)))

    async def drain(self) -> None:
        """Wait until every in-flight write has settled."""
        while self._pending:
            await asyncio.gather(*tuple(self._pending), return_exceptions=True)

    def take_notices(self) -> list[SyncNotice]:
        notices, self._notices = self._notices, []
        return notices

    async def delete_remote_data(self) -> None:
        profile = self._require_profile()
        await self.drain()
        await self._store.delete_user_document(profile.uid)
        self._logger.warning("All stored data deleted for uid=%s", profile.uid)

    async def reinitialize(self) -> UserDocument:
        """Start over from defaults after the stored data was deleted."""
        self._teardown_subscription()
        self._sync_error = None
        self._replace_local(self._seed_settings, Stats())
        return await self.hydrate()

    def logout(self) -> None:
        """Stop following the store and forget all local state."""
        self._teardown_subscription()
        self._profile = None
        self._sync_error = None
        self._notices.clear()
        self._replace_local(Settings(), Stats())
        self._logger.info("Logged out; local state cleared")

    def _track(self, task: asyncio.Task) -> asyncio.Task:
        self._pending.add(task)
        task.add_done_callback(self._on_write_settled)
        return task

    def _on_write_settled(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if self._pending or self._deferred_push is None:
            return
        document, self._deferred_push = self._deferred_push, None
        self._replace_local(document.settings, document.stats)

    async def _append_record(self, uid: str, record: SessionRecord) -> None:
        try:
            await self._store.append_session_record(uid, record)
        except Exception as error:
            self._logger.warning("Session history append failed: %s", error)
            self._notices.append(
                SyncNotice(
                    "warning",
                    f"Session saved to stats, but history sync failed: {sanitize_error(error)}",
                )
            )

    def _handle_outcome(self, outcome: SyncOutcome) -> None:
        if outcome.applied:
            if self._sync_error is not None:
                self._sync_error = None
                self._notices.append(SyncNotice("info", "Sync restored."))
            return

        self._sync_error = outcome.error or "unknown error"
        self._notices.append(
            SyncNotice(
                "error",
                f"Failed to save changes ({self._sync_error}). Local changes were rolled back.",
            )
        )
        self._notify_listeners()

    def _on_remote_change(self, document: Optional[UserDocument]) -> None:
        if document is None:
            self._logger.info("Store reports no document; keeping local state")
            return
        if self._pending:
            # Interim pushes may predate a sibling write; keep only the newest.
            self._deferred_push = document
            return
        self._replace_local(document.settings, document.stats)

    def _replace_local(self, settings: Settings, stats: Stats) -> None:
        self._settings = settings
        self._stats = stats
        self._notify_listeners()

    def _notify_listeners(self) -> None:
        for listener in tuple(self._listeners):
            listener(self._settings, self._stats)

    def _assign_settings(self, settings: Settings) -> None:
        self._settings = settings

    def _assign_stats(self, stats: Stats) -> None:
        self._stats = stats

    def _teardown_subscription(self) -> None:
        self._deferred_push = None
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _require_profile(self) -> UserProfile:
        if self._profile is None:
            raise RuntimeError("Not signed in")
        return self._profile
