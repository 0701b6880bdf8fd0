"""crm_assistant/vector_store/__init__.py — public API of the vector_store package."""

from crm_assistant.vector_store.base import (
    EmbeddingRecord,
    RecordMetadata,
    StoreResult,
    VectorStore,
)
from crm_assistant.vector_store.chroma_store import ChromaVectorStore
from crm_assistant.vector_store.memory_store import InMemoryVectorStore

__all__ = [
    "VectorStore",
    "EmbeddingRecord",
    "RecordMetadata",
    "StoreResult",
    "ChromaVectorStore",
    "InMemoryVectorStore",
]
