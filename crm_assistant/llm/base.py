"""
crm_assistant/llm/base.py

Abstract interface for the generation (chat completion) layer, and the
Prompt object the context assembler hands to it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, List, Optional

ChatMessage = Dict[str, str]


@dataclass
class Prompt:
    """
    A fully assembled prompt.

    Attributes:
        system  : Static system instruction; never truncated.
        context : Retrieved passages joined by the context delimiter; may be "".
        query   : The user's question, verbatim; never truncated.
        sources : Titles of the passages included in ``context``, in order.
    """

    system: str
    context: str
    query: str
    sources: List[str] = field(default_factory=list)

    @property
    def user_content(self) -> str:
        context = self.context if self.context else "(no relevant documents found)"
        return f"Context:\n{context}\n\nQuestion: {self.query}"

    def to_messages(self) -> List[ChatMessage]:
        return [
            {"role": "system", "content": self.system},
            {"role": "user", "content": self.user_content},
        ]

    def char_count(self) -> int:
        """Rendered size in characters, as measured against ``max_input_chars``."""
        return sum(len(m["content"]) for m in self.to_messages())


class GenerationClient(ABC):
    """
    Contract every chat-completion backend must fulfil.

    ``temperature`` and ``max_output_tokens`` are the declared defaults
    used by ``generate``; ``max_input_chars`` (None = unlimited) is read by
    the context assembler to bound the prompt.
    """

    def __init__(
        self,
        temperature: float = 0.7,
        max_output_tokens: int = 500,
        max_input_chars: Optional[int] = None,
    ) -> None:
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens
        self.max_input_chars = max_input_chars

    @abstractmethod
    async def complete(
        self,
        messages: List[ChatMessage],
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """
        Run one chat completion and return the reply text.

        Raises:
            GenerationUnavailable: On network, auth, or empty-reply failure.
        """

    async def generate(self, prompt: Prompt) -> str:
        return await self.complete(
            prompt.to_messages(),
            temperature=self.temperature,
            max_output_tokens=self.max_output_tokens,
        )
