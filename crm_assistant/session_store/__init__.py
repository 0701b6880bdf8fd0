"""crm_assistant/session_store/__init__.py — public API of the session_store package."""

from crm_assistant.session_store.base import InMemorySessionStore, Message, SessionStore
from crm_assistant.session_store.sqlite_store import SQLiteSessionStore

__all__ = [
    "InMemorySessionStore",
    "Message",
    "SessionStore",
    "SQLiteSessionStore",
]
