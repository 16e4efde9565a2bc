# backend/legal_insights/services/tag_service.py
import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from legal_insights.models.permission import UserPermission
from legal_insights.models.tag import NotebookTag, Tag, TagCategory
from legal_insights.services.errors import Conflict, NotFound, ValidationFailed

logger = logging.getLogger(__name__)


class TagService:
    def __init__(self, db: Session):
        self.db = db

    def list_tags(self) -> List[Tuple[Tag, int, int]]:
        """All tags, newest first, with their notebook and grant counts."""
        notebook_counts = (
            self.db.query(NotebookTag.tag_id, func.count().label("n"))
            .group_by(NotebookTag.tag_id)
            .subquery()
        )
        grant_counts = (
            self.db.query(UserPermission.tag_id, func.count().label("n"))
            .group_by(UserPermission.tag_id)
            .subquery()
        )
        rows = (
            self.db.query(
                Tag,
                func.coalesce(notebook_counts.c.n, 0),
                func.coalesce(grant_counts.c.n, 0),
            )
            .outerjoin(notebook_counts, notebook_counts.c.tag_id == Tag.id)
            .outerjoin(grant_counts, grant_counts.c.tag_id == Tag.id)
            .order_by(Tag.created_at.desc(), Tag.name)
            .all()
        )
        return [(tag, notebooks, grants) for tag, notebooks, grants in rows]

    def get(self, tag_id: UUID) -> Tag:
        tag = self.db.get(Tag, tag_id)
        if tag is None:
            raise NotFound("Tag not found")
        return tag

    def create(
        self,
        name: str,
        created_by: Optional[UUID],
        category: TagCategory = TagCategory.OTHER,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Tag:
        name = self._clean_name(name)
        self._ensure_unique(name)
        tag = Tag(
            name=name,
            category=category,
            description=description or None,
            created_by=created_by,
        )
        if color:
            tag.color = color
        self.db.add(tag)
        self.db.commit()
        self.db.refresh(tag)
        logger.info(f"Created tag '{tag.name}' ({tag.id})")
        return tag

    def update(self, tag_id: UUID, **changes) -> Tag:
        """Apply only the given fields. ``description=None`` clears the description."""
        tag = self.get(tag_id)
        if changes.get("name") is not None:
            name = self._clean_name(changes["name"])
            self._ensure_unique(name, exclude_id=tag.id)
            tag.name = name
        if "description" in changes:
            tag.description = changes["description"] or None
        for field in ("category", "color"):
            if changes.get(field) is not None:
                setattr(tag, field, changes[field])
        self.db.commit()
        self.db.refresh(tag)
        return tag

    def delete(self, tag_id: UUID) -> bool:
        """Delete a tag with its notebook, source and grant links. Absent tags are a no-op."""
        tag = self.db.get(Tag, tag_id)
        if tag is None:
            return False
        self.db.delete(tag)
        self.db.commit()
        logger.info(f"Deleted tag {tag_id}")
        return True

    def _clean_name(self, name: str) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationFailed("Tag name is required")
        return name

    def _ensure_unique(self, name: str, exclude_id: Optional[UUID] = None) -> None:
        query = self.db.query(Tag).filter(func.lower(Tag.name) == name.lower())
        if exclude_id is not None:
            query = query.filter(Tag.id != exclude_id)
        if query.first():
            raise Conflict(f"Tag '{name}' already exists")
