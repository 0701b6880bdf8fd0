"""
crm_assistant/document_store/base.py

Durable repository of knowledge documents, the source of truth that the
vector index is derived from.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional


@dataclass(frozen=True)
class NewDocument:
    """Fields supplied by the caller; the store assigns ``id`` and ``created_at``."""

    title: str
    content: str
    type: str
    source: str
    owner_id: str


@dataclass(frozen=True)
class KnowledgeDocument:
    """
    A stored knowledge document.

    Immutable: changing a document means deleting it and ingesting it again.
    """

    id: str
    title: str
    content: str
    type: str
    source: str
    owner_id: str
    created_at: datetime

    @property
    def embedding_text(self) -> str:
        """Text handed to the Embedder: title and body together."""
        return f"{self.title}\n\n{self.content}"


class DocumentStore(ABC):
    """Contract for document persistence backends."""

    @abstractmethod
    def create(self, doc: NewDocument) -> KnowledgeDocument:
        """
        Persist ``doc`` and return it with its assigned id and timestamp.

        Raises:
            DocumentStoreError: If the backend is unavailable.
        """

    @abstractmethod
    def get(self, document_id: str) -> Optional[KnowledgeDocument]:
        """Return the document, or None if no such id exists."""

    @abstractmethod
    def list(self, owner_id: str) -> List[KnowledgeDocument]:
        """Return ``owner_id``'s documents, newest first."""

    @abstractmethod
    def delete(self, document_id: str) -> bool:
        """Delete a document; True if one was removed. Index entries are untouched."""
