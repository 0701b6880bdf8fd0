"""
crm_assistant/vector_store/chroma_store.py

ChromaDB implementation of the VectorStore interface.

Each namespace maps to one Chroma collection in a persistent on-disk client.
All backend-specific details are contained here; the rest of the
application never imports from ``chromadb`` directly.
"""

from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, List

import chromadb
from chromadb.config import Settings as ChromaSettings

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import VectorStoreError
from crm_assistant.core.logger import get_logger
from crm_assistant.vector_store.base import (
    EmbeddingRecord,
    RecordMetadata,
    StoreResult,
    VectorStore,
)

logger = get_logger(__name__)


class ChromaVectorStore(VectorStore):
    """
    VectorStore backed by local ChromaDB persistent collections.

    The client is created on construction; collections are created lazily on
    first use of a namespace and cached.
    """

    def __init__(self, persist_dir: str | None = None) -> None:
        self._persist_dir = persist_dir or settings.chroma_persist_dir
        self._collections: Dict[str, "chromadb.Collection"] = {}
        self._lock = threading.Lock()

        logger.info("Initialising ChromaVectorStore — persist_dir=%s", self._persist_dir)
        try:
            self._client = chromadb.PersistentClient(
                path=self._persist_dir,
                settings=ChromaSettings(anonymized_telemetry=False),
            )
        except Exception as exc:
            raise VectorStoreError(
                f"Failed to initialise ChromaDB at '{self._persist_dir}': {exc}"
            ) from exc

    def _collection(self, namespace: str):
        with self._lock:
            collection = self._collections.get(namespace)
            if collection is None:
                try:
                    collection = self._client.get_or_create_collection(
                        name=namespace,
                        # cosine distance; converted to similarity on the way out
                        metadata={"hnsw:space": "cosine"},
                    )
                except Exception as exc:
                    raise VectorStoreError(
                        f"Cannot open namespace '{namespace}': {exc}"
                    ) from exc
                self._collections[namespace] = collection
            return collection

    def _dimension(self, collection) -> int | None:
        """Length of an already-stored vector, or None for an empty collection."""
        existing = collection.get(limit=1, include=["embeddings"])
        embeddings = existing.get("embeddings")
        if embeddings is None or len(embeddings) == 0:
            return None
        return len(embeddings[0])

    # ── VectorStore interface ──────────────────────────────────────────────────

    def upsert(self, records: List[EmbeddingRecord]) -> None:
        if not records:
            return

        missing = [r.document_id for r in records if not r.vector]
        if missing:
            raise VectorStoreError(f"Records missing vectors: {missing}")

        by_namespace: Dict[str, List[EmbeddingRecord]] = defaultdict(list)
        for record in records:
            by_namespace[record.namespace].append(record)

        for namespace, batch in by_namespace.items():
            collection = self._collection(namespace)
            dims = {len(r.vector) for r in batch}
            try:
                stored_dim = self._dimension(collection)
            except Exception as exc:
                raise VectorStoreError(f"upsert failed: {exc}") from exc
            if stored_dim is not None:
                dims.add(stored_dim)
            if len(dims) > 1:
                raise VectorStoreError(
                    f"Mixed embedding dimensions {sorted(dims)} in namespace '{namespace}'."
                )

            try:
                collection.upsert(
                    ids=[r.document_id for r in batch],
                    embeddings=[r.vector for r in batch],
                    documents=[r.content for r in batch],
                    metadatas=[r.metadata.to_dict() for r in batch],
                )
            except Exception as exc:
                raise VectorStoreError(f"upsert failed: {exc}") from exc
            logger.debug("Upserted %d record(s) into '%s'.", len(batch), namespace)

    def query(
        self, embedding: List[float], top_k: int, namespace: str
    ) -> List[StoreResult]:
        if not embedding:
            raise VectorStoreError("Cannot query with an empty embedding vector.")

        collection = self._collection(namespace)
        try:
            available = collection.count()
            if available == 0:
                return []
            raw = collection.query(
                query_embeddings=[embedding],
                n_results=min(top_k, available),
                include=["documents", "metadatas", "distances"],
            )
        except Exception as exc:
            raise VectorStoreError(f"query failed: {exc}") from exc

        # Chroma returns lists-of-lists (one per query embedding).
        ids = (raw.get("ids") or [[]])[0]
        docs = (raw.get("documents") or [[]])[0]
        metas = (raw.get("metadatas") or [[]])[0]
        distances = (raw.get("distances") or [[]])[0]

        results = [
            StoreResult(
                document_id=doc_id,
                score=round(1.0 - dist, 6),
                metadata=RecordMetadata.from_dict(meta or {}),
                content=doc or "",
            )
            for doc_id, doc, meta, dist in zip(ids, docs, metas, distances)
        ]
        logger.debug("Query on '%s' returned %d result(s).", namespace, len(results))
        return results

    def delete(self, document_id: str, namespace: str) -> None:
        try:
            self._collection(namespace).delete(ids=[document_id])
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(f"delete failed: {exc}") from exc

    def count(self, namespace: str) -> int:
        try:
            return self._collection(namespace).count()
        except VectorStoreError:
            raise
        except Exception as exc:
            raise VectorStoreError(f"count failed: {exc}") from exc

    def clear(self, namespace: str) -> None:
        collection = self._collection(namespace)
        try:
            ids = collection.get(include=[])["ids"]
            if ids:
                collection.delete(ids=ids)
        except Exception as exc:
            raise VectorStoreError(f"clear failed: {exc}") from exc
        logger.info("Cleared %d record(s) from '%s'.", len(ids), namespace)
