"""
crm_assistant/services/retrieval_service.py

Orchestrates knowledge retrieval:

    query string
      └─ Embedder.embed_query()   → [float]
           └─ VectorStore.query() → [StoreResult]   (2·k candidates)
                └─ rank by (score desc, timestamp desc), cut to k

Retrieval enriches generation but is never required by it: any failure in
the embed or search step is logged and turned into an empty result.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import RetrievalUnavailable
from crm_assistant.core.logger import get_logger
from crm_assistant.embedder.base import Embedder
from crm_assistant.vector_store.base import RecordMetadata, StoreResult, VectorStore

logger = get_logger(__name__)

#: Candidates fetched per requested result, so score ties at the cut-off
#: can still be broken by recency.
_OVERFETCH = 2


@dataclass
class RetrievedPassage:
    """One ranked passage handed to the context assembler."""

    document_id: str
    content: str
    metadata: RecordMetadata
    score: float

    @property
    def title(self) -> str:
        return self.metadata.title


def _rank_key(result: StoreResult) -> tuple:
    return (-result.score, -result.metadata.timestamp.timestamp())


class RetrievalService:
    """
    Top-k similarity search over one vector namespace.

    The embedder must be the one used at ingest time so query and document
    vectors share a dimensionality.
    """

    def __init__(
        self,
        embedder: Embedder,
        store: VectorStore,
        namespace: str | None = None,
        default_top_k: int | None = None,
    ) -> None:
        self._embedder = embedder
        self._store = store
        self._namespace = namespace or settings.vector_namespace
        self._default_top_k = default_top_k or settings.retrieval_top_k

    # ── Public API ─────────────────────────────────────────────────────────────

    async def retrieve(self, query: str, k: Optional[int] = None) -> List[RetrievedPassage]:
        """
        Return at most ``k`` passages, most similar first.

        Args:
            query : Free-text question. Blank yields ``[]``.
            k     : Result count, >= 1. Defaults to ``settings.retrieval_top_k``.

        Raises:
            ValueError: ``k`` is smaller than 1.
        """
        top_k = self._default_top_k if k is None else k
        if top_k < 1:
            raise ValueError(f"k must be >= 1, got {top_k}.")

        clean_query = (query or "").strip()
        if not clean_query:
            return []

        try:
            candidates = await self._search(clean_query, top_k * _OVERFETCH)
        except RetrievalUnavailable as exc:
            logger.warning("Retrieval skipped — %s", exc)
            return []

        ranked = sorted(candidates, key=_rank_key)[:top_k]
        logger.info(
            "Retrieved %d passage(s) for query '%s'.", len(ranked), clean_query[:80]
        )
        return [
            RetrievedPassage(
                document_id=r.document_id,
                content=r.content,
                metadata=r.metadata,
                score=r.score,
            )
            for r in ranked
        ]

    # ── Internals ──────────────────────────────────────────────────────────────

    async def _search(self, query: str, candidates: int) -> List[StoreResult]:
        try:
            vector = await asyncio.to_thread(self._embedder.embed_query, query)
        except Exception as exc:
            raise RetrievalUnavailable(f"Query embedding failed: {exc}") from exc

        try:
            return await asyncio.to_thread(
                self._store.query, vector, candidates, self._namespace
            )
        except Exception as exc:
            raise RetrievalUnavailable(f"Vector store query failed: {exc}") from exc
