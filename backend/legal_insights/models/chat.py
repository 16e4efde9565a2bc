# backend/legal_insights/models/chat.py
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from legal_insights.models.base import Base


class ChatMessage(Base):
    """
    Chat history row written by the workflow engine.

    session_id is the notebook id; message holds the engine's JSON payload
    ({"type": "human" | "ai", "content": ...}).
    """
    __tablename__ = "chat_histories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    session_id: Mapped[str] = mapped_column(String(64), index=True)
    message: Mapped[Any] = mapped_column(JSON)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
