"""
crm_assistant/main.py

FastAPI application entry point.

Responsibilities:
  - Create the FastAPI app with metadata from config
  - Register the knowledge-base and chat routers
  - Add a global exception handler for uncaught AppBaseException
  - Expose a /health endpoint for liveness probes
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from crm_assistant.api.chat_controller import router as chat_router
from crm_assistant.api.knowledge_controller import router as knowledge_router
from crm_assistant.core.config import settings
from crm_assistant.core.exceptions import AppBaseException
from crm_assistant.core.logger import get_logger

logger = get_logger(__name__)

# ── App instance ───────────────────────────────────────────────────────────────

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description=(
        "Stores CRM knowledge documents, retrieves the most relevant ones for "
        "a question, and answers through a per-user chat session."
    ),
)

# ── Routers ────────────────────────────────────────────────────────────────────

app.include_router(knowledge_router)
app.include_router(chat_router)

# ── Global exception handler ───────────────────────────────────────────────────

@app.exception_handler(AppBaseException)
async def app_exception_handler(request: Request, exc: AppBaseException) -> JSONResponse:
    """Safety-net for any AppBaseException that escapes a controller."""
    logger.exception("Unhandled application error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"error": str(exc)})


# ── Health endpoint ────────────────────────────────────────────────────────────

@app.get("/health", tags=["Health"], summary="Liveness probe")
async def health() -> dict:
    """Returns 200 OK when the service is running."""
    return {"status": "ok", "version": settings.app_version}
