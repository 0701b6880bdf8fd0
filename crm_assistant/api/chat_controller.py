"""
crm_assistant/api/chat_controller.py

Chat endpoints under /chat/{user_id}.

The controller only adapts HTTP to ChatSessionManager; a generation failure
is not an HTTP error, it comes back as a 200 with the apology turn.

Responses for POST /chat/{user_id}/messages:
  200  Assistant turn appended (reply or apology).
  400  Blank message.
  409  A previous message is still awaiting its reply.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from crm_assistant.api.dependencies import get_chat_registry
from crm_assistant.core.exceptions import EmptyMessageError, RequestInFlightError
from crm_assistant.core.logger import get_logger
from crm_assistant.models.chat_models import (
    ConversationResponse,
    HistoryResponse,
    MessageOut,
    SubmitRequest,
    SubmitResponse,
)
from crm_assistant.services.chat_service import ChatSessionManager, ChatSessionRegistry

logger = get_logger(__name__)

router = APIRouter(prefix="/chat", tags=["Chat"])


def _err(message: str, status: int = 400) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message})


def _conversation(session: ChatSessionManager) -> JSONResponse:
    result = ConversationResponse(
        messages=[MessageOut.from_message(m) for m in session.get_messages()],
        awaiting_reply=session.is_awaiting_reply(),
    )
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


# ── Endpoints ──────────────────────────────────────────────────────────────────

@router.get("/{user_id}/messages", response_model=ConversationResponse, summary="Current conversation")
async def get_messages(
    user_id: str,
    registry: ChatSessionRegistry = Depends(get_chat_registry),
) -> JSONResponse:
    return _conversation(registry.get(user_id))


@router.post("/{user_id}/messages", response_model=SubmitResponse, summary="Ask the assistant")
async def submit(
    user_id: str,
    body: SubmitRequest,
    registry: ChatSessionRegistry = Depends(get_chat_registry),
) -> JSONResponse:
    session = registry.get(user_id)
    try:
        reply = await session.submit(body.text)
    except EmptyMessageError as exc:
        return _err(str(exc))
    except RequestInFlightError as exc:
        logger.info("Rejected overlapping submission for %s.", user_id)
        return _err(str(exc), status=409)

    result = SubmitResponse(reply=MessageOut.from_message(reply))
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))


@router.delete("/{user_id}/messages", response_model=ConversationResponse, summary="Clear history")
async def clear_history(
    user_id: str,
    registry: ChatSessionRegistry = Depends(get_chat_registry),
) -> JSONResponse:
    session = registry.get(user_id)
    session.clear_history()
    return _conversation(session)


@router.get("/{user_id}/history", response_model=HistoryResponse, summary="History grouped by day")
async def grouped_history(
    user_id: str,
    registry: ChatSessionRegistry = Depends(get_chat_registry),
) -> JSONResponse:
    grouped = registry.get(user_id).get_grouped_history()
    result = HistoryResponse(
        groups={
            day: [MessageOut.from_message(m) for m in messages]
            for day, messages in grouped.items()
        }
    )
    return JSONResponse(status_code=200, content=result.model_dump(mode="json"))
