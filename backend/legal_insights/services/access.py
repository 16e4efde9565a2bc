# backend/legal_insights/services/access.py
"""
Notebook access evaluation.

A user may read a notebook when any of the following holds:

1. the user is an admin
2. the user owns the notebook
3. the notebook is public
4. the user holds a non-expired grant for at least one tag on the notebook

``can_access_notebook`` is the pure rendering of these rules and decides
every single-notebook check. ``visible_notebooks_filter`` expresses the same
rules in SQL so list queries can be narrowed in the database.
"""
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Protocol, Set
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from legal_insights.models.notebook import Notebook
from legal_insights.models.permission import UserPermission
from legal_insights.models.tag import NotebookTag
from legal_insights.models.user import User, UserRole


class Grant(Protocol):
    tag_id: UUID
    expires_at: Optional[datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_grant_active(grant: Grant, now: datetime) -> bool:
    return grant.expires_at is None or as_utc(grant.expires_at) > as_utc(now)


def active_grant_tag_ids(grants: Iterable[Grant], now: datetime) -> Set[UUID]:
    return {g.tag_id for g in grants if is_grant_active(g, now)}


def can_access_notebook(
    user: Optional[User],
    notebook: Optional[Notebook],
    notebook_tag_ids: Iterable[UUID],
    user_grants: Iterable[Grant],
    now: datetime,
) -> bool:
    if user is None or notebook is None:
        return False
    if user.role == UserRole.ADMIN:
        return True
    if notebook.owner_user_id is not None and notebook.owner_user_id == user.id:
        return True
    if notebook.is_public:
        return True
    return not set(notebook_tag_ids).isdisjoint(active_grant_tag_ids(user_grants, now))


def filter_accessible(
    user: Optional[User],
    notebooks: Iterable[Notebook],
    user_grants: Iterable[Grant],
    now: datetime,
) -> List[Notebook]:
    """Keep the notebooks the user may read, preserving input order."""
    grants = list(user_grants)
    return [
        nb for nb in notebooks
        if can_access_notebook(user, nb, nb.tag_ids, grants, now)
    ]


def load_user_grants(db: Session, user_id: UUID) -> List[UserPermission]:
    return db.query(UserPermission).filter(UserPermission.user_id == user_id).all()


def load_notebook_tag_ids(db: Session, notebook_id: UUID) -> List[UUID]:
    rows = db.query(NotebookTag.tag_id).filter(NotebookTag.notebook_id == notebook_id).all()
    return [row.tag_id for row in rows]


def check_notebook_access(
    db: Session,
    user: Optional[User],
    notebook: Optional[Notebook],
    now: Optional[datetime] = None,
) -> bool:
    """Evaluate access against the current store contents."""
    if user is None or notebook is None:
        return False
    if now is None:
        now = utcnow()
    return can_access_notebook(
        user,
        notebook,
        load_notebook_tag_ids(db, notebook.id),
        load_user_grants(db, user.id),
        now,
    )


def visible_notebooks_filter(user: User, now: datetime):
    """SQL criterion matching the notebooks ``can_access_notebook`` allows."""
    active_tag_ids = select(UserPermission.tag_id).where(
        UserPermission.user_id == user.id,
        or_(UserPermission.expires_at.is_(None), UserPermission.expires_at > as_utc(now)),
    )
    granted_notebook_ids = select(NotebookTag.notebook_id).where(
        NotebookTag.tag_id.in_(active_tag_ids)
    )
    return or_(
        Notebook.owner_user_id == user.id,
        Notebook.is_public.is_(True),
        Notebook.id.in_(granted_notebook_ids),
    )


def query_visible_notebooks(db: Session, user: User, now: Optional[datetime] = None):
    """Notebook query narrowed to rows visible to the user, tags eagerly loaded."""
    if now is None:
        now = utcnow()
    query = db.query(Notebook).options(
        selectinload(Notebook.tag_links).selectinload(NotebookTag.tag),
        selectinload(Notebook.sources),
    )
    if user.is_admin:
        return query
    return query.filter(visible_notebooks_filter(user, now))
