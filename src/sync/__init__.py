"""Store access and optimistic synchronization of settings and stats."""

from .contracts import StoreLike
from .controller import (
    SYNC_APPLIED,
    SYNC_ROLLED_BACK,
    SyncController,
    SyncNotice,
    SyncOutcome,
    apply_with_sync,
)
from .errors import (
    StoreError,
    StoreNotFoundError,
    StoreUnavailableError,
    StoreWriteError,
    sanitize_error,
)
from .sqlite_store import SqliteStore
from .store import DocumentStore, InMemoryStore

__all__ = [
    "DocumentStore",
    "InMemoryStore",
    "SYNC_APPLIED",
    "SYNC_ROLLED_BACK",
    "SqliteStore",
    "StoreError",
    "StoreLike",
    "StoreNotFoundError",
    "StoreUnavailableError",
    "StoreWriteError",
    "SyncController",
    "SyncNotice",
    "SyncOutcome",
    "apply_with_sync",
    "sanitize_error",
]
