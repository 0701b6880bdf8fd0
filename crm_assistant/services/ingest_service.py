"""
crm_assistant/services/ingest_service.py

Orchestrates the knowledge ingest pipeline:

    title + content
      └─ DocumentStore.create()      → KnowledgeDocument (id assigned)
           └─ Embedder.embed_texts() → [float]
                └─ VectorStore.upsert(EmbeddingRecord)

The three steps are sequential calls against independent stores, not a
transaction. A failure after the document is stored is reported as
IngestionPartialFailure carrying the document id so the caller can retry
the embedding step alone with ``reindex``.

All collaborators are constructor-injected; the HTTP layer wires the
production implementations in ``crm_assistant.api.dependencies``.
"""

from __future__ import annotations

import asyncio
from typing import List

from crm_assistant.core.config import settings
from crm_assistant.core.constants import DEFAULT_DOCUMENT_SOURCE, DEFAULT_DOCUMENT_TYPE
from crm_assistant.core.exceptions import (
    DocumentNotFoundError,
    DocumentStoreError,
    IngestionPartialFailure,
    InvalidDocumentError,
)
from crm_assistant.core.logger import get_logger
from crm_assistant.document_store.base import DocumentStore, KnowledgeDocument, NewDocument
from crm_assistant.embedder.base import Embedder
from crm_assistant.services.sample_knowledge import SAMPLE_DOCUMENTS
from crm_assistant.vector_store.base import EmbeddingRecord, RecordMetadata, VectorStore

logger = get_logger(__name__)


class IngestService:
    """
    Writes knowledge documents and keeps the vector index in step with them.

    Design choices:
    - **Visible partial failure**: a stored-but-unindexed document is never
      rolled back; it is reported with its id.
    - **Off-loop I/O**: store, embedder and index calls are blocking, so they
      run in worker threads via ``asyncio.to_thread``.
    """

    def __init__(
        self,
        documents: DocumentStore,
        embedder: Embedder,
        store: VectorStore,
        namespace: str | None = None,
    ) -> None:
        self._documents = documents
        self._embedder = embedder
        self._store = store
        self._namespace = namespace or settings.vector_namespace

    # ── Public API ─────────────────────────────────────────────────────────────

    async def ingest(
        self,
        title: str,
        content: str,
        doc_type: str = DEFAULT_DOCUMENT_TYPE,
        source: str = DEFAULT_DOCUMENT_SOURCE,
        *,
        owner_id: str,
    ) -> str:
        """
        Store, embed and index one document.

        Returns:
            The id assigned by the document store.

        Raises:
            InvalidDocumentError    : Title or content is blank. Nothing is written.
            DocumentStoreError      : The document could not be stored. Nothing is written.
            IngestionPartialFailure : Stored, but embedding or indexing failed.
        """
        if not title or not title.strip():
            raise InvalidDocumentError("Document title must not be empty.")
        if not content or not content.strip():
            raise InvalidDocumentError("Document content must not be empty.")

        new_doc = NewDocument(
            title=title.strip(),
            content=content.strip(),
            type=(doc_type or DEFAULT_DOCUMENT_TYPE).strip(),
            source=(source or DEFAULT_DOCUMENT_SOURCE).strip(),
            owner_id=owner_id,
        )

        # 1: persist
        try:
            document = await asyncio.to_thread(self._documents.create, new_doc)
        except DocumentStoreError:
            raise
        except Exception as exc:
            raise DocumentStoreError(f"Could not store document: {exc}") from exc

        # 2 & 3: embed + upsert
        try:
            await asyncio.to_thread(self._index, document)
        except Exception as exc:
            logger.warning(
                "Document %s stored but not indexed — %s", document.id, exc
            )
            raise IngestionPartialFailure(document.id) from exc

        logger.info("Ingested '%s' as %s.", document.title[:80], document.id)
        return document.id

    async def reindex(self, document_id: str) -> None:
        """
        Embed and upsert an already-stored document (retry after partial failure).

        Raises:
            DocumentNotFoundError   : No document with that id.
            IngestionPartialFailure : Embedding or indexing failed again.
        """
        document = await asyncio.to_thread(self._documents.get, document_id)
        if document is None:
            raise DocumentNotFoundError(f"Document '{document_id}' not found.")

        try:
            await asyncio.to_thread(self._index, document)
        except Exception as exc:
            logger.warning("Re-index of %s failed — %s", document_id, exc)
            raise IngestionPartialFailure(document_id) from exc
        logger.info("Re-indexed document %s.", document_id)

    async def list_documents(self, owner_id: str) -> List[KnowledgeDocument]:
        return await asyncio.to_thread(self._documents.list, owner_id)

    async def delete_document(self, document_id: str) -> bool:
        """
        Delete a document, then drop its index entry.

        The index delete is best effort: a failure is logged and the stale
        entry stays until the id is deleted again or the namespace is cleared.
        """
        removed = await asyncio.to_thread(self._documents.delete, document_id)
        if not removed:
            return False

        try:
            await asyncio.to_thread(self._store.delete, document_id, self._namespace)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Document %s deleted but index entry kept — %s", document_id, exc)
        logger.info("Deleted document %s.", document_id)
        return True

    async def load_sample_documents(self, owner_id: str) -> List[str]:
        """
        Ingest the bundled sample knowledge base for ``owner_id``.

        Each document is processed independently; failures are logged and
        skipped. Returns the ids of fully indexed documents.
        """
        stored: List[str] = []
        for sample in SAMPLE_DOCUMENTS:
            try:
                document_id = await self.ingest(
                    title=sample["title"],
                    content=sample["content"],
                    owner_id=owner_id,
                    doc_type=sample["type"],
                    source=sample["source"],
                )
                stored.append(document_id)
            except IngestionPartialFailure as exc:
                logger.warning(
                    "Sample '%s' stored as %s but not indexed.",
                    sample["title"],
                    exc.document_id,
                )
            except DocumentStoreError as exc:
                logger.warning("Skipping sample '%s' — %s", sample["title"], exc)

        logger.info("Loaded %d/%d sample document(s).", len(stored), len(SAMPLE_DOCUMENTS))
        return stored

    # ── Internals ──────────────────────────────────────────────────────────────

    def _index(self, document: KnowledgeDocument) -> None:
        vector = self._embedder.embed_texts([document.embedding_text])[0]
        record = EmbeddingRecord(
            document_id=document.id,
            vector=vector,
            metadata=RecordMetadata(
                type=document.type,
                title=document.title,
                source=document.source,
                timestamp=document.created_at,
            ),
            content=document.content,
            namespace=self._namespace,
        )
        self._store.upsert([record])
