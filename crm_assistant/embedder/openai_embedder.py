"""
crm_assistant/embedder/openai_embedder.py

OpenAI embeddings API implementation of the Embedder interface
(``text-embedding-3-small`` by default, 1536 dimensions).
"""

from __future__ import annotations

from typing import List

from openai import OpenAI

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import EmbeddingError
from crm_assistant.core.logger import get_logger
from crm_assistant.embedder.base import Embedder

logger = get_logger(__name__)


class OpenAIEmbedder(Embedder):
    """Embedder that calls the OpenAI ``/embeddings`` endpoint."""

    def __init__(self, client: OpenAI | None = None, model: str | None = None) -> None:
        self._model = model or settings.openai_embedding_model
        self._client = client or OpenAI(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
        )

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        try:
            response = self._client.embeddings.create(model=self._model, input=texts)
        except Exception as exc:
            raise EmbeddingError(f"OpenAI embedding request failed: {exc}") from exc

        # The API may return items out of order; ``index`` maps back to input.
        data = sorted(response.data, key=lambda item: item.index)
        if len(data) != len(texts):
            raise EmbeddingError(
                f"Expected {len(texts)} embedding(s), got {len(data)}."
            )
        logger.debug("Embedded %d text(s) with '%s'.", len(texts), self._model)
        return [list(item.embedding) for item in data]

    def embed_query(self, text: str) -> List[float]:
        return self.embed_texts([text])[0]
