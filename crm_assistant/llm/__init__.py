"""crm_assistant/llm/__init__.py — public API of the llm package."""

from crm_assistant.llm.base import ChatMessage, GenerationClient, Prompt
from crm_assistant.llm.openai_client import OpenAIGenerationClient

__all__ = [
    "ChatMessage",
    "GenerationClient",
    "OpenAIGenerationClient",
    "Prompt",
]
