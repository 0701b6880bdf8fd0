"""
crm_assistant/llm/openai_client.py

OpenAI chat-completions implementation of GenerationClient.

Any OpenAI-compatible endpoint works by setting ``OPENAI_BASE_URL``.
"""

from __future__ import annotations

from typing import List, Optional

from openai import AsyncOpenAI

from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import GenerationUnavailable
from crm_assistant.core.logger import get_logger
from crm_assistant.llm.base import ChatMessage, GenerationClient

logger = get_logger(__name__)


class OpenAIGenerationClient(GenerationClient):
    """GenerationClient backed by ``AsyncOpenAI().chat.completions``."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        max_input_chars: Optional[int] = None,
    ) -> None:
        super().__init__(
            temperature=settings.temperature if temperature is None else temperature,
            max_output_tokens=max_output_tokens or settings.max_output_tokens,
            max_input_chars=max_input_chars or settings.max_input_chars,
        )
        self._model = model or settings.chat_model
        self._client = client
        self._api_key = settings.openai_api_key

    def _get_client(self) -> AsyncOpenAI:
        if self._client is None:
            if not self._api_key:
                raise GenerationUnavailable(
                    "OpenAI API key not found. Set OPENAI_API_KEY."
                )
            self._client = AsyncOpenAI(
                api_key=self._api_key,
                base_url=settings.openai_base_url,
            )
        return self._client

    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_output_tokens,
            )
        except Exception as exc:
            raise GenerationUnavailable(f"Chat completion failed: {exc}") from exc

        if not response.choices:
            raise GenerationUnavailable("Chat completion returned no choices.")
        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise GenerationUnavailable("Chat completion returned an empty reply.")

        logger.debug("'%s' replied with %d character(s).", self._model, len(text))
        return text
