from __future__ import annotations

import asyncio
import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any, Callable, Optional

from .errors import StoreUnavailableError
from .store import DocumentStore


class SqliteStore(DocumentStore):
    """Durable store keeping one JSON document row per user plus a sessions table."""

    def __init__(self, db_path: str | Path, **kwargs: Any):
        super().__init__(**kwargs)
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS users (
                    uid TEXT PRIMARY KEY,
                    document TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sessions (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT NOT NULL UNIQUE,
                    uid TEXT NOT NULL,
                    payload TEXT NOT NULL
                )
                """
            )

    async def _call(self, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as error:
            raise StoreUnavailableError(f"SQLite store failed: {error}") from error

    def _load(self, uid: str) -> Optional[dict[str, Any]]:
        with closing(self._connect()) as conn, conn:
            row = conn.execute(
                "SELECT document FROM users WHERE uid = ?",
                (uid,),
            ).fetchone()
        if row is None:
            return None
        return json.loads(row["document"])

    def _save(self, uid: str, raw: dict[str, Any]) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                INSERT INTO users (uid, document) VALUES (?, ?)
                ON CONFLICT(uid) DO UPDATE SET document = excluded.document
                """,
                (uid, json.dumps(raw)),
            )

    def _delete(self, uid: str) -> None:
        # Both deletes share one transaction.
        with closing(self._connect()) as conn, conn:
            conn.execute("DELETE FROM users WHERE uid = ?", (uid,))
            conn.execute("DELETE FROM sessions WHERE uid = ?", (uid,))

    def _insert_session(self, uid: str, record_id: str, payload: dict[str, Any]) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                "INSERT INTO sessions (id, uid, payload) VALUES (?, ?, ?)",
                (record_id, uid, json.dumps(payload)),
            )

    def _trim_sessions(self, uid: str, keep: int) -> None:
        with closing(self._connect()) as conn, conn:
            conn.execute(
                """
                DELETE FROM sessions
                WHERE uid = ? AND seq NOT IN (
                    SELECT seq FROM sessions WHERE uid = ? ORDER BY seq DESC LIMIT ?
                )
                """,
                (uid, uid, keep),
            )

    def _list_sessions(self, uid: str, limit: int) -> list[dict[str, Any]]:
        with closing(self._connect()) as conn, conn:
            rows = conn.execute(
                """
                SELECT payload FROM sessions
                WHERE uid = ?
                ORDER BY seq DESC
                LIMIT ?
                """,
                (uid, limit),
            ).fetchall()
        return [json.loads(row["payload"]) for row in rows]
