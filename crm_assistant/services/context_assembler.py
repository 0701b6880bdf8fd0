"""
crm_assistant/services/context_assembler.py

Turns ranked passages plus the user's question into a Prompt:

    system instruction
    context   = "Title: …\\nContent: …" items joined by CONTEXT_DELIMITER
    query

When a character limit is set, the lowest-ranked passages are dropped
until the rendered prompt fits. The system instruction and the query are
never shortened, so a prompt may still exceed the limit when even the
empty-context rendering is too long.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from crm_assistant.core.constants import CONTEXT_DELIMITER, SYSTEM_INSTRUCTION
from crm_assistant.core.logger import get_logger
from crm_assistant.llm.base import Prompt
from crm_assistant.services.retrieval_service import RetrievedPassage

logger = get_logger(__name__)


def format_passage(passage: RetrievedPassage) -> str:
    return f"Title: {passage.title}\nContent: {passage.content}"


class ContextAssembler:
    """Builds bounded prompts; stateless apart from its limit."""

    def __init__(
        self,
        max_input_chars: Optional[int] = None,
        system_instruction: str = SYSTEM_INSTRUCTION,
        delimiter: str = CONTEXT_DELIMITER,
    ) -> None:
        self.max_input_chars = max_input_chars
        self._system = system_instruction
        self._delimiter = delimiter

    def assemble(self, retrieved: Sequence[RetrievedPassage], query: str) -> Prompt:
        kept: List[RetrievedPassage] = list(retrieved)
        prompt = self._render(kept, query)

        while (
            kept
            and self.max_input_chars is not None
            and prompt.char_count() > self.max_input_chars
        ):
            dropped = kept.pop()
            logger.debug(
                "Prompt over %d chars — dropped '%s'.", self.max_input_chars, dropped.title
            )
            prompt = self._render(kept, query)

        if len(kept) < len(retrieved):
            logger.info(
                "Kept %d of %d passage(s) to fit the input limit.", len(kept), len(retrieved)
            )
        return prompt

    def _render(self, passages: List[RetrievedPassage], query: str) -> Prompt:
        return Prompt(
            system=self._system,
            context=self._delimiter.join(format_passage(p) for p in passages),
            query=query,
            sources=[p.title for p in passages],
        )
