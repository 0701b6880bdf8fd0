"""crm_assistant/embedder/__init__.py — public API of the embedder package."""

from crm_assistant.embedder.base import Embedder
from crm_assistant.embedder.openai_embedder import OpenAIEmbedder
from crm_assistant.embedder.sentence_transformer_embedder import SentenceTransformerEmbedder

__all__ = [
    "Embedder",
    "OpenAIEmbedder",
    "SentenceTransformerEmbedder",
]
