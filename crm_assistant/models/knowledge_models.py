"""
crm_assistant/models/knowledge_models.py

Pydantic DTOs for the knowledge-base endpoints.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from crm_assistant.core.constants import DEFAULT_DOCUMENT_SOURCE, DEFAULT_DOCUMENT_TYPE
from crm_assistant.document_store.base import KnowledgeDocument


class IngestRequest(BaseModel):
    """
    JSON body for POST /knowledge/.

        {
            "title": "Refund Policy",
            "content": "Refunds are issued within 30 days ...",
            "type": "policy",
            "owner_id": "user-42"
        }

    Blank title or content is rejected by IngestService (400), not here.
    """

    title: str
    content: str
    owner_id: str = Field(min_length=1)
    type: str = DEFAULT_DOCUMENT_TYPE
    source: str = DEFAULT_DOCUMENT_SOURCE


class IngestResponse(BaseModel):
    """
    Response for POST /knowledge/.

    ``indexed`` is False when the document was stored but embedding failed;
    retry with POST /knowledge/{document_id}/reindex.
    """

    document_id: str
    indexed: bool
    message: str


class DocumentOut(BaseModel):
    id: str
    title: str
    content: str
    type: str
    source: str
    owner_id: str
    created_at: datetime

    @classmethod
    def from_document(cls, doc: KnowledgeDocument) -> "DocumentOut":
        return cls(
            id=doc.id,
            title=doc.title,
            content=doc.content,
            type=doc.type,
            source=doc.source,
            owner_id=doc.owner_id,
            created_at=doc.created_at,
        )


class DocumentListResponse(BaseModel):
    documents: List[DocumentOut]


class SampleLoadResponse(BaseModel):
    message: str
    document_ids: List[str]
