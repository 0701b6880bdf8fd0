"""
crm_assistant/services/chat_service.py

Chat session state for one user-facing chat surface.

State machine:

    Idle ──submit(text)──────────▶ AwaitingReply
    AwaitingReply ──reply_received(text)──▶ Idle
    AwaitingReply ──reply_failed(error)───▶ Idle   (apology turn appended)

``clear_history`` is valid in either state. A reply that arrives after a
clear is appended to the fresh log.

Every change to the message list is written through to the SessionStore.
When a save fails the session keeps working in memory only.
"""

from __future__ import annotations

import asyncio
import threading
import uuid
from datetime import date, datetime, timezone, tzinfo
from enum import Enum
from typing import Callable, Dict, List, Optional

from crm_assistant.core.constants import (
    APOLOGY_MESSAGE,
    SESSION_KEY_PREFIX,
    WELCOME_MESSAGE,
    WELCOME_MESSAGE_ID,
)
from crm_assistant.core.exceptions import (
    EmptyMessageError,
    GenerationUnavailable,
    RequestInFlightError,
    SessionPersistenceError,
)
from crm_assistant.core.logger import get_logger
from crm_assistant.services.assistant_service import AssistantService
from crm_assistant.session_store.base import Message, SessionStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionState(str, Enum):
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


class ChatSessionManager:
    """
    Owns the ordered message log and the pending-request flag of one session.

    Mutations are serialised with a per-session lock. ``submit`` releases
    the lock while the assistant works, so the AwaitingReply window is
    exactly the time spent awaiting retrieval and generation.
    """

    def __init__(
        self,
        session_key: str,
        store: SessionStore,
        assistant: AssistantService,
        clock: Clock | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.session_key = session_key
        self._store = store
        self._assistant = assistant
        self._clock = clock or _utcnow
        self._tz = tz
        self._lock = threading.RLock()
        self._pending = False
        self._persistent = True
        self._inflight: Optional[asyncio.Future] = None
        self._messages: List[Message] = self._load()

    # ── UI boundary ────────────────────────────────────────────────────────────

    async def submit(self, text: str) -> Message:
        """
        Append ``text`` as a user turn, generate a reply, append it.

        Always ends Idle with an assistant turn appended: the generated reply,
        or APOLOGY_MESSAGE if generation failed. If the awaiting caller is
        cancelled the exchange still runs to completion and is persisted.

        Raises:
            EmptyMessageError    : ``text`` is blank.
            RequestInFlightError : A previous submission is still awaiting its reply.
        """
        self.begin_request(text)
        self._inflight = asyncio.ensure_future(self._exchange(text.strip()))
        return await asyncio.shield(self._inflight)

    def clear_history(self) -> None:
        """Reset the log to the welcome message. A no-op if already reset."""
        with self._lock:
            if self._is_fresh():
                return
            self._messages = [self._welcome()]
            self._persist()
        logger.info("Cleared chat history for '%s'.", self.session_key)

    def get_messages(self) -> List[Message]:
        with self._lock:
            return list(self._messages)

    def is_awaiting_reply(self) -> bool:
        return self._pending

    @property
    def state(self) -> SessionState:
        return SessionState.AWAITING_REPLY if self._pending else SessionState.IDLE

    def get_grouped_history(self) -> Dict[date, List[Message]]:
        """
        Messages other than the welcome turn, grouped by calendar day.

        Days are computed in the session time zone (server local time when
        none was given). Groups are ordered by day; messages keep log order.
        """
        groups: Dict[date, List[Message]] = {}
        for message in self.get_messages():
            if message.id == WELCOME_MESSAGE_ID:
                continue
            day = message.timestamp.astimezone(self._tz).date()
            groups.setdefault(day, []).append(message)
        return {day: groups[day] for day in sorted(groups)}

    # ── State transitions ──────────────────────────────────────────────────────

    def begin_request(self, text: str) -> Message:
        """Idle → AwaitingReply; appends the user turn."""
        if not text or not text.strip():
            raise EmptyMessageError("Message must not be empty.")
        with self._lock:
            if self._pending:
                raise RequestInFlightError("Wait for the current reply before sending.")
            message = self._new_message(text, is_user=True)
            self._pending = True
            self._append(message)
        return message

    def reply_received(self, text: str) -> Message:
        """AwaitingReply → Idle; appends the assistant turn."""
        with self._lock:
            self._require_pending()
            message = self._new_message(text, is_user=False)
            self._append(message)
            self._pending = False
        return message

    def reply_failed(self, error: BaseException) -> Message:
        """AwaitingReply → Idle; appends the apology, logs ``error``."""
        logger.warning(
            "Reply failed for '%s' — %s: %s",
            self.session_key,
            type(error).__name__,
            error,
        )
        with self._lock:
            self._require_pending()
            message = self._new_message(APOLOGY_MESSAGE, is_user=False)
            self._append(message)
            self._pending = False
        return message

    # ── Internals ──────────────────────────────────────────────────────────────

    async def _exchange(self, query: str) -> Message:
        try:
            reply = await self._assistant.reply(query)
        except GenerationUnavailable as exc:
            return self.reply_failed(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error answering in '%s'.", self.session_key)
            return self.reply_failed(exc)
        return self.reply_received(reply)

    def _require_pending(self) -> None:
        if not self._pending:
            raise RuntimeError(f"No request is awaiting a reply in '{self.session_key}'.")

    def _welcome(self) -> Message:
        return Message(
            id=WELCOME_MESSAGE_ID,
            content=WELCOME_MESSAGE,
            is_user=False,
            timestamp=self._clock(),
        )

    def _is_fresh(self) -> bool:
        return len(self._messages) == 1 and self._messages[0].id == WELCOME_MESSAGE_ID

    def _new_message(self, content: str, is_user: bool) -> Message:
        return Message(
            id=uuid.uuid4().hex,
            content=content,
            is_user=is_user,
            timestamp=self._clock(),
        )

    def _append(self, message: Message) -> None:
        self._messages.append(message)
        self._persist()

    def _load(self) -> List[Message]:
        try:
            saved = self._store.load(self.session_key)
        except SessionPersistenceError as exc:
            logger.warning("Ignoring saved history for '%s' — %s", self.session_key, exc)
            saved = None

        if saved:
            logger.debug("Loaded %d message(s) for '%s'.", len(saved), self.session_key)
            return list(saved)
        return [self._welcome()]

    def _persist(self) -> None:
        if not self._persistent:
            return
        try:
            self._store.save(self.session_key, list(self._messages))
        except SessionPersistenceError as exc:
            self._persistent = False
            logger.warning(
                "History for '%s' is now in-memory only — %s", self.session_key, exc
            )


class ChatSessionRegistry:
    """Process-wide owner of one ChatSessionManager per user, created on first access."""

    def __init__(
        self,
        store: SessionStore,
        assistant: AssistantService,
        tz: tzinfo | None = None,
    ) -> None:
        self._store = store
        self._assistant = assistant
        self._tz = tz
        # Never evicted: one manager per user seen, for the life of the process.
        self._sessions: Dict[str, ChatSessionManager] = {}
        self._lock = threading.Lock()

    @staticmethod
    def session_key(user_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}:{user_id}"

    def get(self, user_id: str) -> ChatSessionManager:
        with self._lock:
            manager = self._sessions.get(user_id)
            if manager is None:
                manager = ChatSessionManager(
                    session_key=self.session_key(user_id),
                    store=self._store,
                    assistant=self._assistant,
                    tz=self._tz,
                )
                self._sessions[user_id] = manager
            return manager
