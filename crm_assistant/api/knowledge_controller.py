"""
crm_assistant/api/knowledge_controller.py

Knowledge-base endpoints under /knowledge.

This layer is responsible only for HTTP concerns:
  - Validating request bodies (pydantic) and query parameters.
  - Delegating to IngestService.
  - Translating service-level errors into HTTP responses.

Responses for POST /knowledge/:
  201  Document stored and indexed.
  202  Document stored but not indexed; body carries ``document_id`` so the
       caller can POST /knowledge/{document_id}/reindex.
  400  Blank title or content.
  500  The document store failed; nothing was written.
"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from crm_assistant.api.dependencies import get_ingest_service
from crm_assistant.core.exceptions import (
    DocumentNotFoundError,
    DocumentStoreError,
    IngestionPartialFailure,
    InvalidDocumentError,
)
from crm_assistant.core.logger import get_logger
from crm_assistant.models.knowledge_models import (
    DocumentListResponse,
    DocumentOut,
    IngestRequest,
    IngestResponse,
    SampleLoadResponse,
)
from crm_assistant.services.ingest_service import IngestService

logger = get_logger(__name__)

router = APIRouter(prefix="/knowledge", tags=["Knowledge"])


def _err(message: str, status: int = 400) -> JSONResponse:
    """Return a JSON error response with the standard error shape."""
    return JSONResponse(status_code=status, content={"error": message})


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.post("/", response_model=IngestResponse, status_code=201, summary="Add a document")
async def ingest(
    body: IngestRequest,
    service: IngestService = Depends(get_ingest_service),
) -> JSONResponse:
    logger.info("Ingest request: owner %s, title '%s'", body.owner_id, body.title[:80])

    try:
        document_id = await service.ingest(
            title=body.title,
            content=body.content,
            owner_id=body.owner_id,
            doc_type=body.type,
            source=body.source,
        )
    except InvalidDocumentError as exc:
        return _err(str(exc))
    except IngestionPartialFailure as exc:
        result = IngestResponse(
            document_id=exc.document_id,
            indexed=False,
            message=f"\"{body.title}\" was saved but could not be indexed yet.",
        )
        return JSONResponse(status_code=202, content=result.model_dump())
    except DocumentStoreError as exc:
        logger.exception("Document store error: %s", exc)
        return _err("Failed to save the document.", status=500)

    result = IngestResponse(
        document_id=document_id,
        indexed=True,
        message=f"Successfully added \"{body.title}\" to the knowledge base!",
    )
    return JSONResponse(status_code=201, content=result.model_dump())


@router.get("/", response_model=DocumentListResponse, summary="List an owner's documents")
async def list_documents(
    owner_id: str = Query(..., min_length=1),
    service: IngestService = Depends(get_ingest_service),
) -> JSONResponse:
    try:
        documents = await service.list_documents(owner_id)
    except DocumentStoreError as exc:
        logger.exception("Document store error: %s", exc)
        return _err("Failed to load documents.", status=500)

    result = DocumentListResponse(documents=[DocumentOut.from_document(d) for d in documents])
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.delete("/{document_id}", summary="Delete a document")
async def delete_document(
    document_id: str,
    service: IngestService = Depends(get_ingest_service),
) -> JSONResponse:
    try:
        removed = await service.delete_document(document_id)
    except DocumentStoreError as exc:
        logger.exception("Document store error: %s", exc)
        return _err("Failed to delete the document.", status=500)

    if not removed:
        return _err(f"Document '{document_id}' not found.", status=404)
    return JSONResponse(status_code=200, content={"deleted": document_id})


@router.post("/{document_id}/reindex", response_model=IngestResponse, summary="Retry indexing")
async def reindex(
    document_id: str,
    service: IngestService = Depends(get_ingest_service),
) -> JSONResponse:
    try:
        await service.reindex(document_id)
    except DocumentNotFoundError as exc:
        return _err(str(exc), status=404)
    except IngestionPartialFailure:
        return _err("Indexing failed again; try later.", status=500)
    except DocumentStoreError as exc:
        logger.exception("Document store error: %s", exc)
        return _err("Failed to load the document.", status=500)

    result = IngestResponse(document_id=document_id, indexed=True, message="Document indexed.")
    return JSONResponse(status_code=200, content=result.model_dump())


@router.post("/samples", response_model=SampleLoadResponse, summary="Load the sample knowledge base")
async def load_samples(
    owner_id: str = Query(..., min_length=1),
    service: IngestService = Depends(get_ingest_service),
) -> JSONResponse:
    ids = await service.load_sample_documents(owner_id)
    result = SampleLoadResponse(
        message=f"Successfully loaded {len(ids)} sample document(s) into the knowledge base!",
        document_ids=ids,
    )
    return JSONResponse(status_code=200, content=result.model_dump())
