"""crm_assistant/document_store/__init__.py — public API of the document_store package."""

from crm_assistant.document_store.base import DocumentStore, KnowledgeDocument, NewDocument
from crm_assistant.document_store.sqlite_store import SQLiteDocumentStore

__all__ = [
    "DocumentStore",
    "KnowledgeDocument",
    "NewDocument",
    "SQLiteDocumentStore",
]
