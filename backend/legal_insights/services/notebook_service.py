# backend/legal_insights/services/notebook_service.py
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from legal_insights.models.notebook import Notebook
from legal_insights.models.tag import NotebookTag, Tag
from legal_insights.models.user import User
from legal_insights.services.access import (
    check_notebook_access,
    filter_accessible,
    load_user_grants,
    query_visible_notebooks,
    utcnow,
)
from legal_insights.services.errors import AccessDenied, NotFound, ValidationFailed

logger = logging.getLogger(__name__)

NOTEBOOK_ORDERINGS = ("recent", "title")


class NotebookService:
    def __init__(self, db: Session):
        self.db = db

    def list_visible(
        self,
        user: User,
        order: str = "recent",
        now: Optional[datetime] = None,
    ) -> List[Notebook]:
        """
        Notebooks the user may read, most recently updated first or by title.

        Ties are broken by id so equal timestamps or titles list in a stable
        order. Expiry is evaluated against ``now``, so the same grants can
        yield a shorter list later.
        """
        if order not in NOTEBOOK_ORDERINGS:
            raise ValidationFailed(f"Unknown ordering '{order}'")
        if now is None:
            now = utcnow()

        query = query_visible_notebooks(self.db, user, now)
        if order == "title":
            query = query.order_by(func.lower(Notebook.title), Notebook.id)
        else:
            query = query.order_by(Notebook.updated_at.desc(), Notebook.id)

        grants = [] if user.is_admin else load_user_grants(self.db, user.id)
        return filter_accessible(user, query.all(), grants, now)

    def get(self, notebook_id: UUID) -> Notebook:
        notebook = self.db.get(Notebook, notebook_id)
        if notebook is None:
            raise NotFound("Notebook not found")
        return notebook

    def get_accessible(
        self,
        user: User,
        notebook_id: UUID,
        now: Optional[datetime] = None,
    ) -> Notebook:
        notebook = self.get(notebook_id)
        if not check_notebook_access(self.db, user, notebook, now):
            raise AccessDenied("Access denied to this notebook")
        return notebook

    def create(
        self,
        owner: User,
        title: str,
        description: Optional[str] = None,
        is_public: bool = False,
        tag_ids: Iterable[UUID] = (),
        **extra,
    ) -> Notebook:
        title = (title or "").strip()
        if not title:
            raise ValidationFailed("Notebook title is required")
        tag_ids = list(dict.fromkeys(tag_ids))
        self._ensure_tags_exist(tag_ids)

        notebook = Notebook(
            title=title,
            description=description,
            is_public=is_public,
            owner_user_id=owner.id,
            **extra,
        )
        self.db.add(notebook)
        self.db.flush()
        for tag_id in tag_ids:
            self.db.add(NotebookTag(notebook_id=notebook.id, tag_id=tag_id, created_by=owner.id))
        self.db.commit()
        self.db.refresh(notebook)
        logger.info(f"Created notebook '{notebook.title}' ({notebook.id}) with {len(tag_ids)} tags")
        return notebook

    def update(self, notebook: Notebook, **changes) -> Notebook:
        for required in ("title", "is_public"):
            if changes.get(required) is None:
                changes.pop(required, None)
        if "title" in changes:
            title = changes["title"].strip()
            if not title:
                raise ValidationFailed("Notebook title is required")
            changes["title"] = title
        for field, value in changes.items():
            setattr(notebook, field, value)
        self.db.commit()
        self.db.refresh(notebook)
        return notebook

    def delete(self, notebook_id: UUID) -> bool:
        notebook = self.db.get(Notebook, notebook_id)
        if notebook is None:
            return False
        self.db.delete(notebook)
        self.db.commit()
        logger.info(f"Deleted notebook {notebook_id}")
        return True

    def set_tags(self, notebook: Notebook, tag_ids: Iterable[UUID], actor: User) -> Notebook:
        """Replace the notebook's tags with exactly ``tag_ids``."""
        wanted = list(dict.fromkeys(tag_ids))
        self._ensure_tags_exist(wanted)
        current = {link.tag_id: link for link in notebook.tag_links}
        for tag_id, link in current.items():
            if tag_id not in wanted:
                notebook.tag_links.remove(link)
        for tag_id in wanted:
            if tag_id not in current:
                notebook.tag_links.append(NotebookTag(tag_id=tag_id, created_by=actor.id))
        self.db.commit()
        self.db.refresh(notebook)
        return notebook

    def add_tag(self, notebook: Notebook, tag_id: UUID, actor: User) -> Notebook:
        if tag_id in notebook.tag_ids:
            return notebook
        return self.set_tags(notebook, notebook.tag_ids + [tag_id], actor)

    def remove_tag(self, notebook: Notebook, tag_id: UUID, actor: User) -> Notebook:
        return self.set_tags(notebook, [t for t in notebook.tag_ids if t != tag_id], actor)

    def _ensure_tags_exist(self, tag_ids: List[UUID]) -> None:
        if not tag_ids:
            return
        found = {row.id for row in self.db.query(Tag.id).filter(Tag.id.in_(tag_ids)).all()}
        missing = [str(t) for t in tag_ids if t not in found]
        if missing:
            raise ValidationFailed(f"Unknown tags: {', '.join(missing)}")
