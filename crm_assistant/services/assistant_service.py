"""
crm_assistant/services/assistant_service.py

One question, one answer:

    RetrievalService.retrieve() → ContextAssembler.assemble() → GenerationClient.generate()

Retrieval never fails this call (it degrades to no context);
GenerationUnavailable propagates so the chat session can substitute its
apology turn.
"""

from __future__ import annotations

from crm_assistant.core.logger import get_logger
from crm_assistant.llm.base import GenerationClient
from crm_assistant.services.context_assembler import ContextAssembler
from crm_assistant.services.retrieval_service import RetrievalService

logger = get_logger(__name__)


class AssistantService:
    def __init__(
        self,
        retriever: RetrievalService,
        generator: GenerationClient,
        assembler: ContextAssembler | None = None,
    ) -> None:
        self._retriever = retriever
        self._generator = generator
        # Input limit is declared by the generation client.
        self._assembler = assembler or ContextAssembler(
            max_input_chars=generator.max_input_chars
        )

    async def reply(self, query: str) -> str:
        """
        Answer ``query`` from the knowledge base.

        Raises:
            GenerationUnavailable: The language model call failed.
        """
        passages = await self._retriever.retrieve(query)
        prompt = self._assembler.assemble(passages, query)
        logger.debug(
            "Prompt for '%s' uses %d source(s), %d chars.",
            query[:80],
            len(prompt.sources),
            prompt.char_count(),
        )
        return await self._generator.generate(prompt)
