# backend/legal_insights/models/source.py
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import JSON, BigInteger, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legal_insights.models.base import Base, TimestampMixin, UUIDMixin


class SourceType(str, Enum):
    PDF = "pdf"
    TEXT = "text"
    WEBSITE = "website"
    YOUTUBE = "youtube"
    AUDIO = "audio"


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Source(Base, UUIDMixin, TimestampMixin):
    """A document attached to a notebook. Ingestion is done by the workflow engine."""
    __tablename__ = "sources"

    notebook_id: Mapped[UUID] = mapped_column(
        ForeignKey("notebooks.id", ondelete="CASCADE"), index=True
    )
    title: Mapped[str] = mapped_column(String(255))
    display_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    type: Mapped[SourceType] = mapped_column()
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_path: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)  # object name in storage
    file_size: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    summary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    extra_metadata: Mapped[Optional[Any]] = mapped_column("metadata", JSON, nullable=True)
    processing_status: Mapped[ProcessingStatus] = mapped_column(default=ProcessingStatus.PENDING)

    notebook = relationship("Notebook", back_populates="sources")
    tag_links: Mapped[List["SourceTag"]] = relationship(
        "SourceTag", back_populates="source", cascade="all, delete-orphan"
    )

    @property
    def tag_ids(self) -> List[UUID]:
        return [link.tag_id for link in self.tag_links]
