# backend/legal_insights/models/permission.py
"""Tag grants conferring read access to tagged notebooks."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legal_insights.models.base import Base, UUIDMixin


class UserPermission(Base, UUIDMixin):
    """
    A (user, tag, optional expiry) grant.

    Expiry is evaluated at read time: a grant whose expires_at has passed is
    ignored by the access checks but stays in the table until revoked or
    purged.
    """
    __tablename__ = "user_permissions"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    tag_id: Mapped[UUID] = mapped_column(ForeignKey("tags.id", ondelete="CASCADE"), index=True)
    granted_by: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    granted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    user = relationship("User", back_populates="permissions", foreign_keys=[user_id])
    tag = relationship("Tag", back_populates="permissions")

    __table_args__ = (
        UniqueConstraint('user_id', 'tag_id', name='uq_user_permission'),
    )
