from datetime import datetime
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel


class ChatMessageRequest(BaseModel):
    session_id: str
    message: str
    user_id: UUID
    notebook_id: UUID


class ChatHistoryItem(BaseModel):
    id: int
    session_id: str
    message: Any
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
