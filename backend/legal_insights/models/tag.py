# backend/legal_insights/models/tag.py
"""Tags and their associations with notebooks and sources."""
from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legal_insights.models.base import Base, UUIDMixin


class TagCategory(str, Enum):
    CLIENT = "client"
    BRAND = "brand"
    TOPIC = "topic"
    TIME_PERIOD = "time_period"
    OTHER = "other"


class Tag(Base, UUIDMixin):
    """
    Categorization label and the unit of access control.

    A user holding an active grant for a tag can read every notebook that
    carries it. Deleting a tag removes its notebook, source and grant rows.
    """
    __tablename__ = "tags"

    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    category: Mapped[TagCategory] = mapped_column(default=TagCategory.OTHER)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(32), default="#6b7280")
    created_by: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    notebook_links: Mapped[List["NotebookTag"]] = relationship(
        "NotebookTag", back_populates="tag", cascade="all, delete-orphan"
    )
    source_links: Mapped[List["SourceTag"]] = relationship(
        "SourceTag", back_populates="tag", cascade="all, delete-orphan"
    )
    permissions: Mapped[List["UserPermission"]] = relationship(
        "UserPermission", back_populates="tag", cascade="all, delete-orphan"
    )


class NotebookTag(Base):
    __tablename__ = "notebook_tags"

    notebook_id: Mapped[UUID] = mapped_column(
        ForeignKey("notebooks.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[UUID] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    notebook = relationship("Notebook", back_populates="tag_links")
    tag = relationship("Tag", back_populates="notebook_links")


class SourceTag(Base):
    __tablename__ = "source_tags"

    source_id: Mapped[UUID] = mapped_column(
        ForeignKey("sources.id", ondelete="CASCADE"), primary_key=True
    )
    tag_id: Mapped[UUID] = mapped_column(
        ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    created_by: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    source = relationship("Source", back_populates="tag_links")
    tag = relationship("Tag", back_populates="source_links")
