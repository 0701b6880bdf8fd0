"""
tests/services/test_chat_service.py

Unit tests for ChatSessionManager and ChatSessionRegistry.

The assistant is an AsyncMock and history lives in InMemorySessionStore,
so every test runs without network or disk.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from crm_assistant.core.constants import APOLOGY_MESSAGE, WELCOME_MESSAGE, WELCOME_MESSAGE_ID
from crm_assistant.core.exceptions import (
    EmptyMessageError,
    GenerationUnavailable,
    RequestInFlightError,
    SessionPersistenceError,
)
from crm_assistant.services.chat_service import (
    ChatSessionManager,
    ChatSessionRegistry,
    SessionState,
)
from crm_assistant.session_store.base import InMemorySessionStore, Message


# ── Fixtures & helpers ─────────────────────────────────────────────────────────

KEY = "crm_ai_chat_history:u1"


class _Clock:
    """Deterministic clock advancing one minute per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now += timedelta(minutes=1)
        return current


def _assistant(reply: str = "Here is the answer.") -> MagicMock:
    assistant = MagicMock()
    assistant.reply = AsyncMock(return_value=reply)
    return assistant


def _manager(store=None, assistant=None, tz=timezone.utc) -> ChatSessionManager:
    return ChatSessionManager(
        session_key=KEY,
        store=store if store is not None else InMemorySessionStore(),
        assistant=assistant or _assistant(),
        clock=_Clock(),
        tz=tz,
    )


def _gated_assistant() -> tuple[MagicMock, asyncio.Event]:
    """Assistant whose reply blocks until the returned event is set."""
    gate = asyncio.Event()

    async def _reply(query: str) -> str:
        await gate.wait()
        return f"answer to {query}"

    assistant = MagicMock()
    assistant.reply = AsyncMock(side_effect=_reply)
    return assistant, gate


# ── Initial state ──────────────────────────────────────────────────────────────

class TestNewSession:

    def test_starts_with_welcome_only(self) -> None:
        manager = _manager()

        (welcome,) = manager.get_messages()

        assert welcome.id == WELCOME_MESSAGE_ID
        assert welcome.content == WELCOME_MESSAGE
        assert welcome.is_user is False

    def test_starts_idle(self) -> None:
        manager = _manager()

        assert manager.state is SessionState.IDLE
        assert manager.is_awaiting_reply() is False

    def test_get_messages_returns_a_copy(self) -> None:
        manager = _manager()

        manager.get_messages().clear()

        assert len(manager.get_messages()) == 1


# ── submit ─────────────────────────────────────────────────────────────────────

class TestSubmit:

    @pytest.mark.asyncio
    async def test_appends_user_then_assistant_turn(self) -> None:
        manager = _manager()

        reply = await manager.submit("What is the refund policy?")

        messages = manager.get_messages()
        assert len(messages) == 3
        assert messages[1].is_user is True
        assert messages[1].content == "What is the refund policy?"
        assert messages[2] == reply
        assert reply.is_user is False
        assert reply.content == "Here is the answer."
        assert manager.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_query_is_trimmed_for_the_assistant(self) -> None:
        manager = _manager()

        await manager.submit("  refunds?  ")

        manager._assistant.reply.assert_awaited_once_with("refunds?")

    @pytest.mark.asyncio
    async def test_message_ids_are_unique_and_timestamps_ordered(self) -> None:
        manager = _manager()

        await manager.submit("one")
        await manager.submit("two")

        messages = manager.get_messages()
        assert len({m.id for m in messages}) == len(messages)
        stamps = [m.timestamp for m in messages]
        assert stamps == sorted(stamps)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_message_rejected_and_log_unchanged(self, text: str) -> None:
        manager = _manager()
        before = manager.get_messages()

        with pytest.raises(EmptyMessageError):
            await manager.submit(text)

        assert manager.get_messages() == before
        assert manager.state is SessionState.IDLE
        manager._assistant.reply.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_submit_while_awaiting_is_rejected(self) -> None:
        assistant, gate = _gated_assistant()
        manager = _manager(assistant=assistant)

        first = asyncio.create_task(manager.submit("first"))
        await asyncio.sleep(0)
        assert manager.state is SessionState.AWAITING_REPLY
        snapshot = manager.get_messages()

        with pytest.raises(RequestInFlightError):
            await manager.submit("second")
        assert manager.get_messages() == snapshot

        gate.set()
        reply = await first
        assert reply.content == "answer to first"
        assert len(manager.get_messages()) == 3
        assert manager.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_generation_failure_appends_apology(self) -> None:
        assistant = MagicMock()
        assistant.reply = AsyncMock(side_effect=GenerationUnavailable("no api key"))
        manager = _manager(assistant=assistant)

        reply = await manager.submit("hello")

        assert reply.content == APOLOGY_MESSAGE
        assert reply.is_user is False
        assert [m.is_user for m in manager.get_messages()] == [False, True, False]
        assert manager.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_unexpected_error_also_appends_apology(self) -> None:
        assistant = MagicMock()
        assistant.reply = AsyncMock(side_effect=RuntimeError("boom"))
        manager = _manager(assistant=assistant)

        reply = await manager.submit("hello")

        assert reply.content == APOLOGY_MESSAGE
        assert manager.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_lose_reply(self) -> None:
        assistant, gate = _gated_assistant()
        manager = _manager(assistant=assistant)

        caller = asyncio.create_task(manager.submit("question"))
        await asyncio.sleep(0)
        caller.cancel()
        with pytest.raises(asyncio.CancelledError):
            await caller

        gate.set()
        await manager._inflight

        messages = manager.get_messages()
        assert messages[-1].content == "answer to question"
        assert manager.state is SessionState.IDLE


# ── Explicit transitions ───────────────────────────────────────────────────────

class TestTransitions:

    def test_reply_without_pending_request_is_an_error(self) -> None:
        manager = _manager()

        with pytest.raises(RuntimeError):
            manager.reply_received("stray")

        with pytest.raises(RuntimeError):
            manager.reply_failed(GenerationUnavailable("x"))

    def test_begin_then_reply_received(self) -> None:
        manager = _manager()

        manager.begin_request("hi")
        assert manager.is_awaiting_reply()
        manager.reply_received("hello")

        assert [m.content for m in manager.get_messages()[1:]] == ["hi", "hello"]
        assert not manager.is_awaiting_reply()


# ── clear_history ──────────────────────────────────────────────────────────────

class TestClearHistory:

    @pytest.mark.asyncio
    async def test_resets_to_single_welcome(self) -> None:
        manager = _manager()
        await manager.submit("hello")

        manager.clear_history()

        (welcome,) = manager.get_messages()
        assert welcome.id == WELCOME_MESSAGE_ID

    @pytest.mark.asyncio
    async def test_is_idempotent(self) -> None:
        manager = _manager()
        await manager.submit("hello")

        manager.clear_history()
        once = manager.get_messages()
        manager.clear_history()

        assert manager.get_messages() == once

    def test_clear_on_fresh_session_does_not_write(self) -> None:
        store = MagicMock()
        store.load.return_value = None
        manager = _manager(store=store)

        manager.clear_history()

        store.save.assert_not_called()

    def test_reply_after_clear_lands_in_new_log(self) -> None:
        manager = _manager()
        manager.begin_request("question")

        manager.clear_history()
        manager.reply_received("late answer")

        messages = manager.get_messages()
        assert [m.id for m in messages][0] == WELCOME_MESSAGE_ID
        assert [m.content for m in messages[1:]] == ["late answer"]
        assert manager.state is SessionState.IDLE


# ── Persistence ────────────────────────────────────────────────────────────────

class TestPersistence:

    @pytest.mark.asyncio
    async def test_new_manager_sees_saved_history(self) -> None:
        store = InMemorySessionStore()
        first = _manager(store=store)
        await first.submit("hello")

        second = _manager(store=store)

        assert second.get_messages() == first.get_messages()

    @pytest.mark.asyncio
    async def test_cleared_history_is_persisted(self) -> None:
        store = InMemorySessionStore()
        first = _manager(store=store)
        await first.submit("hello")
        first.clear_history()

        assert len(store.load(KEY)) == 1

    def test_corrupt_saved_history_starts_fresh(self) -> None:
        store = MagicMock()
        store.load.side_effect = SessionPersistenceError("bad json")

        manager = _manager(store=store)

        (welcome,) = manager.get_messages()
        assert welcome.id == WELCOME_MESSAGE_ID

    def test_empty_saved_history_starts_fresh(self) -> None:
        store = InMemorySessionStore()
        store.save(KEY, [])

        manager = _manager(store=store)

        assert [m.id for m in manager.get_messages()] == [WELCOME_MESSAGE_ID]

    @pytest.mark.asyncio
    async def test_save_failure_keeps_session_in_memory(self) -> None:
        store = MagicMock()
        store.load.return_value = None
        store.save.side_effect = SessionPersistenceError("disk full")
        manager = _manager(store=store)

        await manager.submit("hello")
        await manager.submit("again")

        assert len(manager.get_messages()) == 5
        assert store.save.call_count == 1


# ── Grouped history ────────────────────────────────────────────────────────────

class TestGroupedHistory:

    def _seeded(self, tz=timezone.utc) -> ChatSessionManager:
        utc = timezone.utc
        store = InMemorySessionStore()
        store.save(
            KEY,
            [
                Message(WELCOME_MESSAGE_ID, WELCOME_MESSAGE, False, datetime(2024, 1, 1, 8, 0, tzinfo=utc)),
                Message("m1", "morning", True, datetime(2024, 1, 1, 9, 0, tzinfo=utc)),
                Message("m2", "evening", False, datetime(2024, 1, 1, 22, 0, tzinfo=utc)),
                Message("m3", "next day", True, datetime(2024, 1, 2, 8, 0, tzinfo=utc)),
            ],
        )
        return _manager(store=store, tz=tz)

    def test_groups_by_calendar_day(self) -> None:
        grouped = self._seeded().get_grouped_history()

        assert list(grouped) == [date(2024, 1, 1), date(2024, 1, 2)]
        assert [m.id for m in grouped[date(2024, 1, 1)]] == ["m1", "m2"]
        assert [m.id for m in grouped[date(2024, 1, 2)]] == ["m3"]

    def test_welcome_is_excluded(self) -> None:
        grouped = self._seeded().get_grouped_history()

        ids = [m.id for messages in grouped.values() for m in messages]
        assert WELCOME_MESSAGE_ID not in ids

    def test_session_timezone_shifts_day_boundary(self) -> None:
        plus_three = timezone(timedelta(hours=3))

        grouped = self._seeded(tz=plus_three).get_grouped_history()

        assert [m.id for m in grouped[date(2024, 1, 1)]] == ["m1"]
        assert [m.id for m in grouped[date(2024, 1, 2)]] == ["m2", "m3"]

    def test_fresh_session_has_no_groups(self) -> None:
        assert _manager().get_grouped_history() == {}


# ── Registry ───────────────────────────────────────────────────────────────────

class TestChatSessionRegistry:

    def test_same_user_gets_same_manager(self) -> None:
        registry = ChatSessionRegistry(store=InMemorySessionStore(), assistant=_assistant())

        assert registry.get("u1") is registry.get("u1")

    def test_users_are_isolated(self) -> None:
        registry = ChatSessionRegistry(store=InMemorySessionStore(), assistant=_assistant())

        registry.get("u1").begin_request("hello")

        assert registry.get("u2").is_awaiting_reply() is False
        assert len(registry.get("u2").get_messages()) == 1

    def test_session_key_format(self) -> None:
        registry = ChatSessionRegistry(store=InMemorySessionStore(), assistant=_assistant())

        assert ChatSessionRegistry.session_key("u1") == "crm_ai_chat_history:u1"
        assert registry.get("u7").session_key == "crm_ai_chat_history:u7"
