"""
crm_assistant/vector_store/memory_store.py

In-process VectorStore: exact cosine similarity over numpy arrays.
Used for development (``VECTOR_BACKEND=memory``) and in tests.
"""

from __future__ import annotations

import threading
from typing import Dict, List

import numpy as np

from crm_assistant.core.exceptions import VectorStoreError
from crm_assistant.vector_store.base import EmbeddingRecord, StoreResult, VectorStore


class InMemoryVectorStore(VectorStore):
    """Brute-force nearest-neighbour index, one dict of records per namespace."""

    def __init__(self) -> None:
        self._namespaces: Dict[str, Dict[str, EmbeddingRecord]] = {}
        self._lock = threading.Lock()

    def upsert(self, records: List[EmbeddingRecord]) -> None:
        if not records:
            return

        with self._lock:
            for record in records:
                if not record.vector:
                    raise VectorStoreError(f"Record '{record.document_id}' has no vector.")
                space = self._namespaces.setdefault(record.namespace, {})
                others = [r for doc_id, r in space.items() if doc_id != record.document_id]
                if others and len(others[0].vector) != len(record.vector):
                    raise VectorStoreError(
                        f"Dimension {len(record.vector)} does not match "
                        f"{len(others[0].vector)} in namespace '{record.namespace}'."
                    )
                space[record.document_id] = record

    def query(
        self, embedding: List[float], top_k: int, namespace: str
    ) -> List[StoreResult]:
        if not embedding:
            raise VectorStoreError("Cannot query with an empty embedding vector.")

        with self._lock:
            records = list(self._namespaces.get(namespace, {}).values())
        if not records:
            return []

        matrix = np.asarray([r.vector for r in records], dtype=float)
        query = np.asarray(embedding, dtype=float)
        if matrix.shape[1] != query.shape[0]:
            raise VectorStoreError(
                f"Query dimension {query.shape[0]} does not match index dimension "
                f"{matrix.shape[1]}."
            )

        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
        with np.errstate(divide="ignore", invalid="ignore"):
            scores = np.where(norms > 0, matrix @ query / norms, 0.0)

        order = np.argsort(-scores, kind="stable")[:top_k]
        return [
            StoreResult(
                document_id=records[i].document_id,
                score=float(scores[i]),
                metadata=records[i].metadata,
                content=records[i].content,
            )
            for i in order
        ]

    def delete(self, document_id: str, namespace: str) -> None:
        with self._lock:
            self._namespaces.get(namespace, {}).pop(document_id, None)

    def count(self, namespace: str) -> int:
        with self._lock:
            return len(self._namespaces.get(namespace, {}))

    def clear(self, namespace: str) -> None:
        with self._lock:
            self._namespaces.pop(namespace, None)
