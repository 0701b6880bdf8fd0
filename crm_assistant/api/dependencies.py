"""
crm_assistant/api/dependencies.py

Composition root: builds the production collaborators from settings and
hands them to controllers through FastAPI ``Depends``.

Each provider is cached so the process shares one instance, built on the
first request rather than at import. Tests replace providers with
``app.dependency_overrides[get_ingest_service] = lambda: fake``.
"""

from __future__ import annotations

from datetime import tzinfo
from functools import lru_cache
from typing import Optional
from zoneinfo import ZoneInfo

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import SessionPersistenceError
from crm_assistant.core.logger import get_logger
from crm_assistant.document_store import DocumentStore, SQLiteDocumentStore
from crm_assistant.embedder import Embedder, OpenAIEmbedder, SentenceTransformerEmbedder
from crm_assistant.llm import GenerationClient, OpenAIGenerationClient
from crm_assistant.services.assistant_service import AssistantService
from crm_assistant.services.chat_service import ChatSessionRegistry
from crm_assistant.services.ingest_service import IngestService
from crm_assistant.services.retrieval_service import RetrievalService
from crm_assistant.session_store import InMemorySessionStore, SessionStore, SQLiteSessionStore
from crm_assistant.vector_store import ChromaVectorStore, InMemoryVectorStore, VectorStore

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_embedder() -> Embedder:
    if settings.embedding_provider == "openai":
        return OpenAIEmbedder()
    return SentenceTransformerEmbedder()


@lru_cache(maxsize=1)
def get_vector_store() -> VectorStore:
    if settings.vector_backend == "memory":
        logger.info("Using in-memory vector store; the index is lost on restart.")
        return InMemoryVectorStore()
    return ChromaVectorStore()


@lru_cache(maxsize=1)
def get_document_store() -> DocumentStore:
    return SQLiteDocumentStore()


@lru_cache(maxsize=1)
def get_generation_client() -> GenerationClient:
    return OpenAIGenerationClient()


@lru_cache(maxsize=1)
def get_ingest_service() -> IngestService:
    return IngestService(
        documents=get_document_store(),
        embedder=get_embedder(),
        store=get_vector_store(),
    )


@lru_cache(maxsize=1)
def get_retrieval_service() -> RetrievalService:
    return RetrievalService(embedder=get_embedder(), store=get_vector_store())


def _session_tz() -> Optional[tzinfo]:
    return ZoneInfo(settings.session_timezone) if settings.session_timezone else None


def _session_store() -> SessionStore:
    try:
        return SQLiteSessionStore()
    except SessionPersistenceError as exc:
        logger.warning("Chat history will not survive restarts: %s", exc)
        return InMemorySessionStore()


@lru_cache(maxsize=1)
def get_chat_registry() -> ChatSessionRegistry:
    assistant = AssistantService(
        retriever=get_retrieval_service(),
        generator=get_generation_client(),
    )
    return ChatSessionRegistry(
        store=_session_store(),
        assistant=assistant,
        tz=_session_tz(),
    )
