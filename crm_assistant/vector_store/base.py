"""
crm_assistant/vector_store/base.py

Abstract interface for the namespaced vector index.

Design goals:
  - Services depend only on this interface, never on a concrete backend.
  - EmbeddingRecord and StoreResult are the shared vocabulary across layers.
  - Records are keyed by the owning KnowledgeDocument id; the index holds a
    derived copy, it does not own the document.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


# ── Shared data-transfer objects ──────────────────────────────────────────────

@dataclass
class RecordMetadata:
    """
    Descriptive fields stored next to each vector.

    Attributes:
        type      : Document category ("knowledge", "procedure", "policy", ...).
        title     : Document title, rendered into the prompt context.
        source    : Where the document came from ("manual", "import", ...).
        timestamp : Creation time of the document; newer wins score ties.
    """

    type: str
    title: str
    source: str
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "source": self.source,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "RecordMetadata":
        raw_ts = payload.get("timestamp")
        if isinstance(raw_ts, datetime):
            timestamp = raw_ts
        elif raw_ts:
            timestamp = datetime.fromisoformat(raw_ts)
        else:
            timestamp = _EPOCH
        return cls(
            type=str(payload.get("type", "")),
            title=str(payload.get("title", "")),
            source=str(payload.get("source", "")),
            timestamp=timestamp,
        )


@dataclass
class EmbeddingRecord:
    """
    One indexed document.

    Attributes:
        document_id : Id assigned by the Document Store.
        vector      : Embedding; every vector in a namespace has the same length.
        metadata    : RecordMetadata copied from the document.
        content     : Passage text returned with search hits.
        namespace   : Index partition the record lives in.
    """

    document_id: str
    vector: List[float]
    metadata: RecordMetadata
    content: str
    namespace: str = "knowledge"


@dataclass
class StoreResult:
    """
    A single hit from a similarity search.

    ``score`` is cosine similarity: higher means more similar, range [-1, 1].
    """

    document_id: str
    score: float
    metadata: RecordMetadata
    content: str = ""


# ── Abstract base ──────────────────────────────────────────────────────────────

class VectorStore(ABC):
    """
    Contract every vector-index backend must fulfil.

    Implementations must be safe for concurrent upserts from the ingestion
    path while the retrieval path queries; last write wins per document id.
    """

    @abstractmethod
    def upsert(self, records: List[EmbeddingRecord]) -> None:
        """
        Add or overwrite records, each in its own ``namespace``.

        Raises:
            VectorStoreError: On backend failure, an empty vector, or a vector
                whose dimensionality differs from the namespace's existing one.
        """

    @abstractmethod
    def query(
        self, embedding: List[float], top_k: int, namespace: str
    ) -> List[StoreResult]:
        """
        Return up to ``top_k`` records of ``namespace`` by descending similarity.
        An empty namespace yields an empty list.

        Raises:
            VectorStoreError: If the backend operation fails.
        """

    @abstractmethod
    def delete(self, document_id: str, namespace: str) -> None:
        """
        Remove a record; deleting an unknown id is a no-op.

        Raises:
            VectorStoreError: If the backend operation fails.
        """

    @abstractmethod
    def count(self, namespace: str) -> int:
        """Number of records currently held in ``namespace``."""

    @abstractmethod
    def clear(self, namespace: str) -> None:
        """Remove every record of ``namespace``; the namespace itself remains."""
