"""
crm_assistant/core/exceptions.py

Custom exception hierarchy for the application.

Raising typed exceptions from services lets controllers catch specific
cases and return the correct HTTP status code without leaking internals.
"""


class AppBaseException(Exception):
    """Root exception — catch-all for any application-level error."""


# ── Document store exceptions ──────────────────────────────────────────────────

class DocumentStoreError(AppBaseException):
    """Raised when the document store is unavailable or rejects the input."""


class InvalidDocumentError(DocumentStoreError):
    """Raised when a document is submitted with a blank title or content."""


class DocumentNotFoundError(DocumentStoreError):
    """Raised when an operation references a document id that does not exist."""


# ── Ingest exceptions ──────────────────────────────────────────────────────────

class EmbeddingError(AppBaseException):
    """Raised when the embedding model fails to produce vectors."""


class IngestionPartialFailure(AppBaseException):
    """
    Raised when a document was stored but could not be embedded or indexed.

    The document exists without an index entry; callers retry with
    ``IngestService.reindex(document_id)``.
    """

    def __init__(self, document_id: str, message: str | None = None) -> None:
        self.document_id = document_id
        super().__init__(
            message or f"Document '{document_id}' was stored but not indexed."
        )


# ── Vector store exceptions ────────────────────────────────────────────────────

class VectorStoreError(AppBaseException):
    """Raised when an interaction with the vector database fails."""


# ── Retrieval / generation exceptions ──────────────────────────────────────────

class RetrievalUnavailable(AppBaseException):
    """Raised internally when the index cannot be searched; never reaches users."""


class GenerationUnavailable(AppBaseException):
    """Raised when the language model call fails."""


# ── Chat session exceptions ────────────────────────────────────────────────────

class SessionPersistenceError(AppBaseException):
    """Raised when chat history cannot be loaded from or saved to storage."""


class EmptyMessageError(AppBaseException):
    """Raised when an empty or whitespace-only message is submitted."""


class RequestInFlightError(AppBaseException):
    """Raised when a message is submitted while a reply is still pending."""
