# backend/legal_insights/api/chat.py
"""The send-chat-message relay and notebook chat history."""
import logging
from typing import List

from fastapi import APIRouter, Request, Response, status
from fastapi.responses import JSONResponse

from legal_insights.api.deps import AccessibleNotebook, CurrentUser, DBSession, Workflow, ensure_can_manage
from legal_insights.schemas.chat import ChatHistoryItem, ChatMessageRequest
from legal_insights.services.chat_service import ChatRelay, clear_history, list_history
from legal_insights.services.errors import AccessDenied, ServiceError, ValidationFailed

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Chat"])

RELAY_PATH = "/api/v1/send-chat-message"
RELAY_CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


async def relay_cors_middleware(request: Request, call_next):
    """Answer preflights and stamp permissive CORS headers on every relay response."""
    if request.url.path != RELAY_PATH:
        return await call_next(request)
    if request.method == "OPTIONS":
        return Response(status_code=status.HTTP_204_NO_CONTENT, headers=RELAY_CORS_HEADERS)
    response = await call_next(request)
    response.headers.update(RELAY_CORS_HEADERS)
    return response


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/send-chat-message")
def send_chat_message(request_data: ChatMessageRequest, db: DBSession, current_user: CurrentUser, workflow: Workflow):
    """
    Relay a chat message to the workflow engine.

    The sender's access to the notebook is checked first; on denial the
    engine is never contacted and a 403 with an access-denied error is
    returned. The engine's reply is wrapped as {"success": true, "data": ...}.
    """
    relay = ChatRelay(db, workflow)
    try:
        outgoing = relay.send(
            current_user,
            session_id=request_data.session_id,
            message=request_data.message,
            user_id=request_data.user_id,
            notebook_id=request_data.notebook_id,
        )
    except AccessDenied as e:
        return _error(status.HTTP_403_FORBIDDEN, str(e))
    except ValidationFailed as e:
        return _error(status.HTTP_400_BAD_REQUEST, str(e))
    except ServiceError as e:
        logger.error(f"Error in send-chat-message: {e}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Failed to send message to webhook")

    return {"success": True, "data": outgoing.response}


@router.get("/notebooks/{notebook_id}/chat", response_model=List[ChatHistoryItem])
def get_chat_history(notebook: AccessibleNotebook, db: DBSession):
    return list_history(db, notebook.id)


@router.delete("/notebooks/{notebook_id}/chat", status_code=status.HTTP_204_NO_CONTENT)
def delete_chat_history(notebook: AccessibleNotebook, db: DBSession, current_user: CurrentUser):
    ensure_can_manage(notebook, current_user)
    clear_history(db, notebook.id)
