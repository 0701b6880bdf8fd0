"""
crm_assistant/session_store/base.py

Generic key-value persistence for chat history.

A session key identifies one user's chat surface; the value is the full,
ordered message list. Stores always replace the whole list on save.
"""

from __future__ import annotations

import copy
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Message:
    """
    One chat turn.

    Attributes:
        id        : Unique within its session.
        content   : Text shown to the user.
        is_user   : True for user turns, False for assistant turns.
        timestamp : Timezone-aware creation time.
    """

    id: str
    content: str
    is_user: bool
    timestamp: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "isUser": self.is_user,
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Message":
        """
        Rebuild a Message from ``to_dict`` output.

        Raises:
            KeyError, TypeError, ValueError: On malformed payloads.
        """
        is_user = payload["isUser"]
        if not isinstance(is_user, bool):
            raise TypeError(f"isUser must be a bool, got {type(is_user).__name__}")
        return cls(
            id=str(payload["id"]),
            content=str(payload["content"]),
            is_user=is_user,
            timestamp=datetime.fromisoformat(payload["timestamp"]),
        )


class SessionStore(ABC):
    """Contract for chat-history persistence backends."""

    @abstractmethod
    def load(self, session_key: str) -> Optional[List[Message]]:
        """
        Return the saved messages, or None when nothing was saved under the key.

        Raises:
            SessionPersistenceError: Storage unreachable or data corrupt.
        """

    @abstractmethod
    def save(self, session_key: str, messages: List[Message]) -> None:
        """
        Replace the saved list for ``session_key``.

        Raises:
            SessionPersistenceError: Storage unreachable.
        """


class InMemorySessionStore(SessionStore):
    """Process-local store; history survives manager re-creation, not restarts."""

    def __init__(self) -> None:
        self._data: Dict[str, List[Message]] = {}
        self._lock = threading.Lock()

    def load(self, session_key: str) -> Optional[List[Message]]:
        with self._lock:
            saved = self._data.get(session_key)
            return copy.copy(saved) if saved is not None else None

    def save(self, session_key: str, messages: List[Message]) -> None:
        with self._lock:
            self._data[session_key] = list(messages)
