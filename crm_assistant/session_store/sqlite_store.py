"""SQLite-backed SessionStore: one JSON-encoded message list per session key."""

from __future__ import annotations

import json
import sqlite3
import threading
import time
from pathlib import Path
from typing import List, Optional

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import SessionPersistenceError
from crm_assistant.core.logger import get_logger
from crm_assistant.session_store.base import Message, SessionStore

logger = get_logger(__name__)

SESSION_SCHEMA_VERSION = 1


class SQLiteSessionStore(SessionStore):
    """Stores ``{"version": N, "messages": [...]}`` payloads in a ``chat_sessions`` table."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = Path(db_path or settings.session_db_path)
        self._lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS chat_sessions (
                        session_key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at REAL NOT NULL
                    )
                    """
                )
                conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise SessionPersistenceError(
                f"Cannot open session database '{self.db_path}': {exc}"
            ) from exc

    def load(self, session_key: str) -> Optional[List[Message]]:
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    "SELECT payload FROM chat_sessions WHERE session_key = ?",
                    (session_key,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise SessionPersistenceError(f"load failed: {exc}") from exc

        if not row:
            return None

        try:
            payload = json.loads(row[0])
            if payload.get("version") != SESSION_SCHEMA_VERSION:
                raise ValueError(f"unsupported schema version {payload.get('version')!r}")
            return [Message.from_dict(item) for item in payload["messages"]]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise SessionPersistenceError(
                f"Corrupt history for '{session_key}': {exc}"
            ) from exc

    def save(self, session_key: str, messages: List[Message]) -> None:
        encoded = json.dumps(
            {
                "version": SESSION_SCHEMA_VERSION,
                "messages": [m.to_dict() for m in messages],
            }
        )
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    "REPLACE INTO chat_sessions (session_key, payload, updated_at) "
                    "VALUES (?, ?, ?)",
                    (session_key, encoded, time.time()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise SessionPersistenceError(f"save failed: {exc}") from exc
        logger.debug("Saved %d message(s) under '%s'.", len(messages), session_key)
