"""
crm_assistant/models/chat_models.py

Pydantic DTOs for the chat endpoints.
"""

from datetime import date, datetime
from typing import Dict, List

from pydantic import BaseModel

from crm_assistant.session_store.base import Message


class MessageOut(BaseModel):
    id: str
    content: str
    is_user: bool
    timestamp: datetime

    @classmethod
    def from_message(cls, message: Message) -> "MessageOut":
        return cls(
            id=message.id,
            content=message.content,
            is_user=message.is_user,
            timestamp=message.timestamp,
        )


class SubmitRequest(BaseModel):
    """
    JSON body for POST /chat/{user_id}/messages.

        { "text": "What is the refund policy?" }
    """

    text: str


class SubmitResponse(BaseModel):
    reply: MessageOut


class ConversationResponse(BaseModel):
    messages: List[MessageOut]
    awaiting_reply: bool


class HistoryResponse(BaseModel):
    """Non-welcome messages grouped by ISO calendar day, oldest day first."""

    groups: Dict[date, List[MessageOut]]
