# backend/legal_insights/api/permissions.py
"""Tag grant administration."""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status

from legal_insights.api.deps import DBSession, AdminUser, CurrentUser
from legal_insights.models.permission import UserPermission
from legal_insights.schemas.permission import PermissionGrant, PermissionResponse, PurgeResponse
from legal_insights.services.access import is_grant_active, utcnow
from legal_insights.services.permission_service import PermissionService

router = APIRouter(prefix="/permissions", tags=["Permissions"])


def _to_response(permission: UserPermission, now: datetime) -> PermissionResponse:
    response = PermissionResponse.model_validate(permission)
    response.is_active = is_grant_active(permission, now)
    return response


@router.get("", response_model=List[PermissionResponse])
def list_permissions(
    db: DBSession,
    current_user: AdminUser,
    user_id: Optional[UUID] = Query(None),
):
    now = utcnow()
    return [_to_response(p, now) for p in PermissionService(db).list_permissions(user_id)]


@router.get("/me", response_model=List[PermissionResponse])
def list_my_permissions(db: DBSession, current_user: CurrentUser):
    now = utcnow()
    return [_to_response(p, now) for p in PermissionService(db).list_permissions(current_user.id)]


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
def grant_permission(grant: PermissionGrant, db: DBSession, current_user: AdminUser):
    """Grant a user access to every notebook carrying a tag, optionally until expires_at."""
    permission = PermissionService(db).grant(
        user_id=grant.user_id,
        tag_id=grant.tag_id,
        granted_by=current_user.id,
        expires_at=grant.expires_at,
    )
    return _to_response(permission, utcnow())


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
def revoke_permission(permission_id: UUID, db: DBSession, current_user: AdminUser):
    """Revoke a grant. Revoking an absent grant succeeds."""
    PermissionService(db).revoke(permission_id)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def revoke_permission_for(
    db: DBSession,
    current_user: AdminUser,
    user_id: UUID = Query(...),
    tag_id: UUID = Query(...),
):
    PermissionService(db).revoke_for(user_id, tag_id)


@router.post("/purge-expired", response_model=PurgeResponse)
def purge_expired_permissions(db: DBSession, current_user: AdminUser):
    return PurgeResponse(deleted=PermissionService(db).purge_expired())
