# backend/legal_insights/services/stats_service.py
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from legal_insights.models import (
    ChatMessage, Note, Notebook, Source, Tag, User, UserPermission, UserRole,
)
from legal_insights.services.access import as_utc, utcnow


def collect_stats(db: Session, now: Optional[datetime] = None) -> Dict[str, object]:
    """Row counts per store for the system admin console."""
    if now is None:
        now = as_utc(utcnow())
    else:
        now = as_utc(now)

    active_grants = db.query(UserPermission).filter(
        or_(UserPermission.expires_at.is_(None), UserPermission.expires_at > now)
    ).count()
    total_grants = db.query(UserPermission).count()

    sources_by_status = {
        status.value: count
        for status, count in db.query(Source.processing_status, func.count())
        .group_by(Source.processing_status)
        .all()
    }

    return {
        "users": db.query(User).count(),
        "admins": db.query(User).filter(User.role == UserRole.ADMIN).count(),
        "notebooks": db.query(Notebook).count(),
        "public_notebooks": db.query(Notebook).filter(Notebook.is_public.is_(True)).count(),
        "sources": db.query(Source).count(),
        "sources_by_status": sources_by_status,
        "notes": db.query(Note).count(),
        "chat_messages": db.query(ChatMessage).count(),
        "tags": db.query(Tag).count(),
        "active_permissions": active_grants,
        "expired_permissions": total_grants - active_grants,
    }
