# backend/legal_insights/models/notebook.py
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legal_insights.models.base import Base, TimestampMixin, UUIDMixin


class GenerationStatus(str, Enum):
    PENDING = "pending"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class AudioStatus(str, Enum):
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


class Notebook(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "notebooks"

    title: Mapped[str] = mapped_column(String(255), index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    icon: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    color: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    example_questions: Mapped[Optional[List[str]]] = mapped_column(JSON, nullable=True)
    # Public notebooks are readable by every authenticated user
    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    generation_status: Mapped[GenerationStatus] = mapped_column(default=GenerationStatus.PENDING)

    # Audio overview produced by the workflow engine
    audio_overview_generation_status: Mapped[Optional[AudioStatus]] = mapped_column(nullable=True)
    audio_overview_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    audio_object_name: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    audio_url_expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Ownership
    owner_user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    owner = relationship("User", back_populates="notebooks")

    tag_links: Mapped[List["NotebookTag"]] = relationship(
        "NotebookTag", back_populates="notebook", cascade="all, delete-orphan"
    )
    sources: Mapped[List["Source"]] = relationship(
        "Source", back_populates="notebook", cascade="all, delete-orphan"
    )
    notes: Mapped[List["Note"]] = relationship(
        "Note", back_populates="notebook", cascade="all, delete-orphan"
    )

    @property
    def tag_ids(self) -> List[UUID]:
        return [link.tag_id for link in self.tag_links]

    @property
    def tags(self) -> List["Tag"]:
        return [link.tag for link in self.tag_links]

    @property
    def source_count(self) -> int:
        return len(self.sources)
