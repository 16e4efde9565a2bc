# backend/legal_insights/api/tags.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, status

from legal_insights.api.deps import DBSession, AdminUser, CurrentUser
from legal_insights.schemas.tag import TagCreate, TagUpdate, TagResponse, TagWithCounts
from legal_insights.services.tag_service import TagService

router = APIRouter(prefix="/tags", tags=["Tags"])


@router.get("", response_model=List[TagWithCounts])
def list_tags(db: DBSession, current_user: CurrentUser):
    """All tags with how many notebooks carry them and how many grants reference them."""
    return [
        TagWithCounts.model_validate(tag).model_copy(
            update={"notebook_count": notebooks, "permission_count": grants}
        )
        for tag, notebooks, grants in TagService(db).list_tags()
    ]


@router.post("", response_model=TagResponse, status_code=status.HTTP_201_CREATED)
def create_tag(tag_data: TagCreate, db: DBSession, current_user: AdminUser):
    return TagService(db).create(
        name=tag_data.name,
        created_by=current_user.id,
        category=tag_data.category,
        description=tag_data.description,
        color=tag_data.color,
    )


@router.get("/{tag_id}", response_model=TagResponse)
def get_tag(tag_id: UUID, db: DBSession, current_user: CurrentUser):
    return TagService(db).get(tag_id)


@router.patch("/{tag_id}", response_model=TagResponse)
def update_tag(tag_id: UUID, tag_data: TagUpdate, db: DBSession, current_user: AdminUser):
    return TagService(db).update(tag_id, **tag_data.model_dump(exclude_unset=True))


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag_id: UUID, db: DBSession, current_user: AdminUser):
    """Delete a tag. Notebook links and grants referencing it go with it."""
    TagService(db).delete(tag_id)
