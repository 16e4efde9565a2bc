# backend/legal_insights/services/chat_service.py
"""Relaying chat messages to the workflow engine behind the notebook access gate."""
import logging
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_insights.models.chat import ChatMessage
from legal_insights.models.notebook import Notebook
from legal_insights.models.user import User
from legal_insights.services.access import check_notebook_access, load_notebook_tag_ids, utcnow
from legal_insights.services.errors import AccessDenied, ServiceError, ValidationFailed
from legal_insights.services.workflow_client import WorkflowClient

logger = logging.getLogger(__name__)

ACCESS_DENIED_MESSAGE = "Access denied to this notebook"


class MessageState(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


class OutgoingMessage:
    """Delivery state of one chat message: idle -> pending -> confirmed | failed."""

    def __init__(self, session_id: str, content: str):
        self.session_id = session_id
        self.content = content
        self.state = MessageState.IDLE
        self.response: Any = None
        self.error: Optional[str] = None

    def submit(self) -> None:
        self._move(MessageState.IDLE, MessageState.PENDING)

    def confirm(self, response: Any) -> None:
        self._move(MessageState.PENDING, MessageState.CONFIRMED)
        self.response = response

    def fail(self, error: str) -> None:
        self._move(MessageState.PENDING, MessageState.FAILED)
        self.error = error

    def _move(self, expected: MessageState, target: MessageState) -> None:
        if self.state != expected:
            raise ValueError(f"Cannot move message from {self.state.value} to {target.value}")
        self.state = target


class ChatRelay:
    def __init__(self, db: Session, workflow: WorkflowClient):
        self.db = db
        self.workflow = workflow

    def send(
        self,
        caller: User,
        session_id: str,
        message: str,
        user_id: UUID,
        notebook_id: UUID,
        now: Optional[datetime] = None,
    ) -> OutgoingMessage:
        """
        Forward a message to the workflow engine if the sender may read the notebook.

        The engine receives the notebook's tag ids as ``tag_filters`` so
        retrieval stays within the documents the notebook covers. Raises
        AccessDenied without contacting the engine when the check fails.
        """
        if not message or not message.strip():
            raise ValidationFailed("Message is required")
        if now is None:
            now = utcnow()

        sender = self._resolve_sender(caller, user_id)
        notebook = self.db.get(Notebook, notebook_id)
        if not check_notebook_access(self.db, sender, notebook, now):
            logger.warning(f"Chat access denied for user {user_id} on notebook {notebook_id}")
            raise AccessDenied(ACCESS_DENIED_MESSAGE)

        tag_ids = load_notebook_tag_ids(self.db, notebook_id)
        payload = {
            "session_id": session_id,
            "message": message,
            "user_id": str(user_id),
            "notebook_id": str(notebook_id),
            "tag_filters": [str(t) for t in tag_ids],
            "timestamp": now.isoformat(),
        }

        outgoing = OutgoingMessage(session_id, message)
        outgoing.submit()
        logger.info(f"Relaying chat message for notebook {notebook_id} with {len(tag_ids)} tag filters")
        try:
            data = self.workflow.send_chat(payload)
        except ServiceError as e:
            outgoing.fail(str(e))
            raise
        outgoing.confirm(data)
        return outgoing

    def _resolve_sender(self, caller: User, user_id: UUID) -> Optional[User]:
        if caller.id == user_id:
            return caller
        # Only admins may relay on behalf of someone else
        if not caller.is_admin:
            raise AccessDenied(ACCESS_DENIED_MESSAGE)
        return self.db.get(User, user_id)


def list_history(db: Session, notebook_id: UUID) -> List[ChatMessage]:
    return db.query(ChatMessage).filter(
        ChatMessage.session_id == str(notebook_id)
    ).order_by(ChatMessage.id).all()


def clear_history(db: Session, notebook_id: UUID) -> int:
    deleted = db.query(ChatMessage).filter(
        ChatMessage.session_id == str(notebook_id)
    ).delete(synchronize_session=False)
    db.commit()
    return deleted
