# backend/legal_insights/services/permission_service.py
"""Granting, revoking and purging tag grants."""
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from legal_insights.models.permission import UserPermission
from legal_insights.models.tag import Tag
from legal_insights.models.user import User
from legal_insights.services.access import as_utc, is_grant_active, utcnow
from legal_insights.services.errors import NotFound, ValidationFailed

logger = logging.getLogger(__name__)


class PermissionService:
    def __init__(self, db: Session):
        self.db = db

    def list_permissions(self, user_id: Optional[UUID] = None) -> List[UserPermission]:
        query = self.db.query(UserPermission).options(
            joinedload(UserPermission.user), joinedload(UserPermission.tag)
        )
        if user_id is not None:
            query = query.filter(UserPermission.user_id == user_id)
        return query.order_by(UserPermission.granted_at.desc(), UserPermission.id).all()

    def grant(
        self,
        user_id: UUID,
        tag_id: UUID,
        granted_by: Optional[UUID],
        expires_at: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> UserPermission:
        """
        Grant a user access to a tag.

        Re-granting an existing (user, tag) pair replaces its expiry. An
        expiry at or before ``now`` is rejected before anything is written.
        """
        if now is None:
            now = utcnow()
        if expires_at is not None:
            expires_at = as_utc(expires_at)
            if expires_at <= as_utc(now):
                raise ValidationFailed("Expiry must be in the future")

        if self.db.get(User, user_id) is None:
            raise NotFound("User not found")
        if self.db.get(Tag, tag_id) is None:
            raise NotFound("Tag not found")

        permission = self._find(user_id, tag_id)
        if permission is None:
            permission = UserPermission(
                user_id=user_id,
                tag_id=tag_id,
                granted_by=granted_by,
                expires_at=expires_at,
            )
            self.db.add(permission)
            try:
                self.db.commit()
            except IntegrityError:
                # A concurrent grant for the same pair won the insert
                self.db.rollback()
                permission = self._find(user_id, tag_id)
                if permission is None:
                    raise
                self._renew(permission, granted_by, expires_at, now)
        else:
            self._renew(permission, granted_by, expires_at, now)

        self.db.refresh(permission)
        logger.info(
            f"Granted tag {tag_id} to user {user_id}"
            f" (expires {expires_at.isoformat() if expires_at else 'never'})"
        )
        return permission

    def revoke(self, permission_id: UUID) -> bool:
        """Delete a grant. Returns False when it was already absent."""
        permission = self.db.get(UserPermission, permission_id)
        if permission is None:
            return False
        self.db.delete(permission)
        self.db.commit()
        logger.info(f"Revoked permission {permission_id}")
        return True

    def revoke_for(self, user_id: UUID, tag_id: UUID) -> bool:
        deleted = self.db.query(UserPermission).filter(
            UserPermission.user_id == user_id,
            UserPermission.tag_id == tag_id,
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info(f"Revoked tag {tag_id} from user {user_id}")
        return bool(deleted)

    def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete grants whose expiry has passed. Access results do not change."""
        if now is None:
            now = utcnow()
        deleted = self.db.query(UserPermission).filter(
            UserPermission.expires_at.is_not(None),
            UserPermission.expires_at <= as_utc(now),
        ).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info(f"Purged {deleted} expired permissions")
        return deleted

    @staticmethod
    def is_active(permission: UserPermission, now: Optional[datetime] = None) -> bool:
        return is_grant_active(permission, now or utcnow())

    def _find(self, user_id: UUID, tag_id: UUID) -> Optional[UserPermission]:
        return self.db.query(UserPermission).filter(
            UserPermission.user_id == user_id,
            UserPermission.tag_id == tag_id,
        ).first()

    def _renew(
        self,
        permission: UserPermission,
        granted_by: Optional[UUID],
        expires_at: Optional[datetime],
        now: datetime,
    ) -> None:
        permission.expires_at = expires_at
        permission.granted_by = granted_by
        permission.granted_at = as_utc(now)
        self.db.commit()
