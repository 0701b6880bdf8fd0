"""
tests/conftest.py

Shared pytest fixtures available to all test modules.

Fixtures defined here are auto-discovered by pytest — no import needed.
"""

import re
import zlib
from typing import List

import pytest
from fastapi.testclient import TestClient

from crm_assistant.embedder.base import Embedder
from crm_assistant.llm.base import ChatMessage, GenerationClient
from crm_assistant.main import app


# ── Core client fixture ────────────────────────────────────────────────────────

@pytest.fixture(scope="session")
def client() -> TestClient:
    """
    A synchronous TestClient wrapping the FastAPI app.

    session-scoped so the app is instantiated once per test run.
    The lifespan context (startup/shutdown events) is entered automatically.
    """
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


@pytest.fixture
def override():
    """
    Install ``app.dependency_overrides`` entries for one test.

    Usage:
        override(get_ingest_service, fake_service)
    """

    def _set(provider, instance) -> None:
        app.dependency_overrides[provider] = lambda: instance

    yield _set
    app.dependency_overrides.clear()


# ── Deterministic collaborators ────────────────────────────────────────────────

_DIM = 512
_WORD = re.compile(r"[a-z0-9]+")


class KeywordEmbedder(Embedder):
    """
    Hashed bag-of-words vectors: texts sharing words have positive cosine
    similarity, texts sharing none score 0. No model download.
    """

    def __init__(self) -> None:
        self.calls: List[List[str]] = []

    def _vector(self, text: str) -> List[float]:
        vector = [0.0] * _DIM
        for word in _WORD.findall(text.lower()):
            vector[zlib.crc32(word.encode()) % _DIM] += 1.0
        if not any(vector):
            vector[0] = 1e-6
        return vector

    def embed_texts(self, texts: List[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> List[float]:
        return self.embed_texts([text])[0]


class RecordingGenerator(GenerationClient):
    """Echo model: returns a fixed reply and keeps every message list it got."""

    def __init__(self, reply: str = "Refunds are issued within 30 days.", **kwargs) -> None:
        super().__init__(**kwargs)
        self.reply = reply
        self.received: List[List[ChatMessage]] = []

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        self.received.append(messages)
        return self.reply


@pytest.fixture
def keyword_embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture
def recording_generator() -> RecordingGenerator:
    return RecordingGenerator()
