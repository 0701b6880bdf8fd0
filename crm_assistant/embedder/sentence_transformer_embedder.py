"""
crm_assistant/embedder/sentence_transformer_embedder.py

Local sentence-transformers implementation of the Embedder interface.

The model is loaded on first use so the API process starts without
touching HuggingFace; a knowledge document is embedded as one passage.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import EmbeddingError
from crm_assistant.core.logger import get_logger
from crm_assistant.embedder.base import Embedder

if TYPE_CHECKING:
    from sentence_transformers import SentenceTransformer as _ST

logger = get_logger(__name__)


class SentenceTransformerEmbedder(Embedder):
    """
    Embedder backed by a HuggingFace sentence-transformers model.

    Default model: ``all-MiniLM-L6-v2`` (384 dimensions, normalised output).
    Documents longer than the model's window are truncated by the model
    itself.
    """

    def __init__(self, model_name: str | None = None, batch_size: int = 16) -> None:
        self._model_name: str = model_name or settings.embedding_model
        self._batch_size = batch_size
        self._model: Optional[_ST] = None  # loaded on first use

    def _get_model(self) -> _ST:
        if self._model is None:
            logger.info("Loading embedding model '%s' …", self._model_name)
            try:
                from sentence_transformers import SentenceTransformer

                self._model = SentenceTransformer(self._model_name)
            except Exception as exc:
                raise EmbeddingError(
                    f"Failed to load embedding model '{self._model_name}': {exc}"
                ) from exc
            logger.info(
                "Model '%s' loaded — dimension %d",
                self._model_name,
                self._model.get_sentence_embedding_dimension(),
            )
        return self._model

    # ── Embedder interface ─────────────────────────────────────────────────────

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []

        model = self._get_model()
        try:
            vectors = model.encode(
                texts,
                batch_size=self._batch_size,
                show_progress_bar=False,
                convert_to_numpy=True,
                normalize_embeddings=True,
            )
        except Exception as exc:
            raise EmbeddingError(f"embed_texts failed: {exc}") from exc
        return [v.tolist() for v in vectors]

    def embed_query(self, text: str) -> List[float]:
        return self.embed_texts([text])[0]
