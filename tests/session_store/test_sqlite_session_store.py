"""
tests/session_store/test_sqlite_session_store.py

Tests for SQLiteSessionStore and the Message wire format.
"""

import json
import sqlite3
from datetime import datetime, timezone

import pytest

from crm_assistant.core.exceptions import SessionPersistenceError
from crm_assistant.session_store.base import InMemorySessionStore, Message
from crm_assistant.session_store.sqlite_store import SESSION_SCHEMA_VERSION, SQLiteSessionStore

KEY = "crm_ai_chat_history:u1"


def _messages() -> list[Message]:
    ts = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
    return [
        Message("welcome", "Hello!", False, ts),
        Message("m1", "What is the refund policy?", True, ts),
    ]


def _write_raw(path, payload: str) -> None:
    with sqlite3.connect(path) as conn:
        conn.execute(
            "REPLACE INTO chat_sessions (session_key, payload, updated_at) VALUES (?, ?, 0)",
            (KEY, payload),
        )
        conn.commit()


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "sessions.sqlite3"


class TestMessageFormat:

    def test_to_dict_uses_wire_keys(self) -> None:
        payload = _messages()[1].to_dict()

        assert payload == {
            "id": "m1",
            "content": "What is the refund policy?",
            "isUser": True,
            "timestamp": "2024-01-01T09:00:00+00:00",
        }

    def test_from_dict_rejects_non_bool_is_user(self) -> None:
        payload = _messages()[1].to_dict()
        payload["isUser"] = "yes"

        with pytest.raises(TypeError):
            Message.from_dict(payload)

    def test_from_dict_rejects_missing_field(self) -> None:
        payload = _messages()[1].to_dict()
        del payload["content"]

        with pytest.raises(KeyError):
            Message.from_dict(payload)


class TestSQLiteSessionStore:

    def test_unknown_key_loads_none(self, db_path) -> None:
        assert SQLiteSessionStore(db_path).load(KEY) is None

    def test_save_then_load_in_new_instance(self, db_path) -> None:
        SQLiteSessionStore(db_path).save(KEY, _messages())

        assert SQLiteSessionStore(db_path).load(KEY) == _messages()

    def test_save_replaces_whole_list(self, db_path) -> None:
        store = SQLiteSessionStore(db_path)
        store.save(KEY, _messages())
        store.save(KEY, _messages()[:1])

        assert len(store.load(KEY)) == 1

    def test_payload_is_versioned(self, db_path) -> None:
        SQLiteSessionStore(db_path).save(KEY, _messages())

        with sqlite3.connect(db_path) as conn:
            (raw,) = conn.execute("SELECT payload FROM chat_sessions").fetchone()

        assert json.loads(raw)["version"] == SESSION_SCHEMA_VERSION

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            json.dumps([1, 2, 3]),
            json.dumps({"version": 99, "messages": []}),
            json.dumps({"version": SESSION_SCHEMA_VERSION, "messages": [{"id": "x"}]}),
        ],
    )
    def test_corrupt_payload_raises(self, db_path, payload: str) -> None:
        store = SQLiteSessionStore(db_path)
        _write_raw(db_path, payload)

        with pytest.raises(SessionPersistenceError):
            store.load(KEY)

    def test_keys_are_independent(self, db_path) -> None:
        store = SQLiteSessionStore(db_path)
        store.save(KEY, _messages())

        assert store.load("crm_ai_chat_history:u2") is None


class TestInMemorySessionStore:

    def test_load_returns_copy(self) -> None:
        store = InMemorySessionStore()
        store.save(KEY, _messages())

        store.load(KEY).clear()

        assert len(store.load(KEY)) == 2
