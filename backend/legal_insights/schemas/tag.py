# backend/legal_insights/schemas/tag.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field

from legal_insights.models.tag import TagCategory


class TagBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    category: TagCategory = TagCategory.OTHER
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=32)


class TagCreate(TagBase):
    pass


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[TagCategory] = None
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=32)


class TagResponse(TagBase):
    id: UUID
    color: str
    created_by: Optional[UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class TagSummary(BaseModel):
    id: UUID
    name: str
    category: TagCategory
    color: str

    class Config:
        from_attributes = True


class TagWithCounts(TagResponse):
    notebook_count: int = 0
    permission_count: int = 0
