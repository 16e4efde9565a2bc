# backend/legal_insights/schemas/permission.py
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel

from legal_insights.schemas.tag import TagSummary


class PermissionGrant(BaseModel):
    user_id: UUID
    tag_id: UUID
    expires_at: Optional[datetime] = None


class PermissionUser(BaseModel):
    id: UUID
    email: str
    full_name: Optional[str] = None

    class Config:
        from_attributes = True


class PermissionResponse(BaseModel):
    id: UUID
    user_id: UUID
    tag_id: UUID
    granted_by: Optional[UUID]
    granted_at: datetime
    expires_at: Optional[datetime]
    is_active: bool = False
    user: Optional[PermissionUser] = None
    tag: Optional[TagSummary] = None

    class Config:
        from_attributes = True


class PurgeResponse(BaseModel):
    deleted: int
