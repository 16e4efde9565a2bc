# backend/legal_insights/api/websocket.py
"""WebSocket endpoint for live notebook status."""
import asyncio
import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect
from sqlalchemy.orm import Session

from legal_insights.config import get_settings
from legal_insights.database import get_db
from legal_insights.models.notebook import Notebook
from legal_insights.models.user import User
from legal_insights.schemas.notebook import NotebookStatus
from legal_insights.services.access import check_notebook_access
from legal_insights.services.audio_service import AudioOverviewService
from legal_insights.services.storage_service import StorageService, get_storage_service
from legal_insights.services.url_refresher import SignedUrlRefresher
from legal_insights.utils.security import decode_access_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])

CLOSE_UNAUTHORIZED = 4001
CLOSE_FORBIDDEN = 4003
CLOSE_NOT_FOUND = 4004


async def get_current_user_ws(websocket: WebSocket, token: str, db: Session) -> Optional[User]:
    """Authenticate WebSocket connection using JWT token."""
    user_id = decode_access_token(token)
    if not user_id:
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="Invalid token")
        return None

    user = db.get(User, user_id)
    if not user or not user.is_active:
        await websocket.close(code=CLOSE_UNAUTHORIZED, reason="User not found")
        return None

    return user


def build_status(notebook: Notebook) -> dict:
    status = NotebookStatus(
        notebook_id=notebook.id,
        generation_status=notebook.generation_status,
        audio_overview_generation_status=notebook.audio_overview_generation_status,
        audio_overview_url=notebook.audio_overview_url,
        audio_url_expires_at=notebook.audio_url_expires_at,
        sources=[
            {
                "id": str(source.id),
                "title": source.title,
                "processing_status": source.processing_status.value,
            }
            for source in notebook.sources
        ],
    )
    return {"type": "status_update", **status.model_dump(mode="json")}


@router.websocket("/ws/notebooks/{notebook_id}")
async def notebook_status(
    websocket: WebSocket,
    notebook_id: UUID,
    token: str = Query(...),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
):
    """
    Push notebook status snapshots while the connection is open.

    Access is re-checked before every push, so revoking a grant or letting it
    expire closes the socket. While connected, the audio overview URL is
    re-signed in the background before it expires. Sending "close" ends the
    session.
    """
    await websocket.accept()

    user = await get_current_user_ws(websocket, token, db)
    if not user:
        return

    notebook = db.get(Notebook, notebook_id)
    if notebook is None:
        await websocket.close(code=CLOSE_NOT_FOUND, reason="Notebook not found")
        return

    settings = get_settings()
    audio = AudioOverviewService(db)
    refresher = SignedUrlRefresher(
        lambda: audio.refresh_url(notebook, storage),
        settings.audio_refresh_interval_seconds,
    )
    stop = asyncio.Event()
    refresh_task = None

    try:
        while True:
            db.expire_all()
            if not check_notebook_access(db, user, notebook):
                await websocket.close(code=CLOSE_FORBIDDEN, reason="Access denied to this notebook")
                return

            if refresh_task is None:
                refresh_task = asyncio.create_task(refresher.run(stop))

            await websocket.send_json(build_status(notebook))

            try:
                message = await asyncio.wait_for(
                    websocket.receive_text(),
                    timeout=settings.status_push_interval_seconds,
                )
            except asyncio.TimeoutError:
                continue
            if message.strip().lower() == "close":
                await websocket.close()
                return

    except WebSocketDisconnect:
        logger.info(f"Status WebSocket disconnected for notebook {notebook_id}")
    except Exception as e:
        logger.error(f"Status WebSocket error for notebook {notebook_id}: {e}")
        await websocket.close(code=4000, reason=str(e))
    finally:
        stop.set()
        if refresh_task is not None:
            await refresh_task
