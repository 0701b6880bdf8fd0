"""SQLite-backed DocumentStore."""

from __future__ import annotations

import sqlite3
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import DocumentStoreError
from crm_assistant.core.logger import get_logger
from crm_assistant.document_store.base import DocumentStore, KnowledgeDocument, NewDocument

logger = get_logger(__name__)

_COLUMNS = "id, title, content, type, source, owner_id, created_at"


def _row_to_document(row: tuple) -> KnowledgeDocument:
    return KnowledgeDocument(
        id=row[0],
        title=row[1],
        content=row[2],
        type=row[3],
        source=row[4],
        owner_id=row[5],
        created_at=datetime.fromisoformat(row[6]),
    )


class SQLiteDocumentStore(DocumentStore):
    """One ``knowledge_documents`` table in a local SQLite file."""

    def __init__(self, db_path: str | Path | None = None) -> None:
        self.db_path = Path(db_path or settings.document_db_path)
        self._lock = threading.Lock()
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            with sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS knowledge_documents (
                        id TEXT PRIMARY KEY,
                        title TEXT NOT NULL,
                        content TEXT NOT NULL,
                        type TEXT NOT NULL,
                        source TEXT NOT NULL,
                        owner_id TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                    """
                )
                conn.execute(
                    "CREATE INDEX IF NOT EXISTS idx_documents_owner "
                    "ON knowledge_documents (owner_id, created_at)"
                )
                conn.commit()
        except (sqlite3.Error, OSError) as exc:
            raise DocumentStoreError(
                f"Cannot open document database '{self.db_path}': {exc}"
            ) from exc

    def create(self, doc: NewDocument) -> KnowledgeDocument:
        stored = KnowledgeDocument(
            id=uuid.uuid4().hex,
            title=doc.title,
            content=doc.content,
            type=doc.type,
            source=doc.source,
            owner_id=doc.owner_id,
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                conn.execute(
                    f"INSERT INTO knowledge_documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        stored.id,
                        stored.title,
                        stored.content,
                        stored.type,
                        stored.source,
                        stored.owner_id,
                        stored.created_at.isoformat(),
                    ),
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"create failed: {exc}") from exc

        logger.debug("Stored document %s for owner %s.", stored.id, stored.owner_id)
        return stored

    def get(self, document_id: str) -> Optional[KnowledgeDocument]:
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                row = conn.execute(
                    f"SELECT {_COLUMNS} FROM knowledge_documents WHERE id = ?",
                    (document_id,),
                ).fetchone()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"get failed: {exc}") from exc
        return _row_to_document(row) if row else None

    def list(self, owner_id: str) -> List[KnowledgeDocument]:
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                rows = conn.execute(
                    f"SELECT {_COLUMNS} FROM knowledge_documents "
                    "WHERE owner_id = ? ORDER BY created_at DESC",
                    (owner_id,),
                ).fetchall()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"list failed: {exc}") from exc
        return [_row_to_document(row) for row in rows]

    def delete(self, document_id: str) -> bool:
        try:
            with self._lock, sqlite3.connect(self.db_path) as conn:
                cursor = conn.execute(
                    "DELETE FROM knowledge_documents WHERE id = ?", (document_id,)
                )
                conn.commit()
        except sqlite3.Error as exc:
            raise DocumentStoreError(f"delete failed: {exc}") from exc
        return cursor.rowcount > 0
