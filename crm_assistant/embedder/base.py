"""
crm_assistant/embedder/base.py

Abstract interface for the embedding layer.

Ingestion and retrieval must use the same Embedder instance (or at least the
same model): every vector written to one namespace has the dimensionality of
the model that produced it, and query vectors are compared against them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List


class Embedder(ABC):
    """
    Contract every embedding backend must fulfil.

    ``embed_texts`` is the document-side path used by ingestion;
    ``embed_query`` is the query-side path used by the retriever.
    """

    @abstractmethod
    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        """
        Encode knowledge-document texts into embedding vectors.

        Args:
            texts: Strings to embed. An empty list yields an empty list.

        Returns:
            One float vector per input text, in input order.

        Raises:
            EmbeddingError: If the backend fails to produce embeddings.
        """

    @abstractmethod
    def embed_query(self, text: str) -> List[float]:
        """
        Encode a single user query.

        Raises:
            EmbeddingError: If the backend fails to produce an embedding.
        """
