# backend/legal_insights/api/users.py
"""User management API endpoints."""
from typing import List
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from legal_insights.api.deps import DBSession, AdminUser, CurrentUser
from legal_insights.models.user import User, UserRole
from legal_insights.schemas.user import UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["User Management"])


@router.get("", response_model=List[UserResponse])
def list_users(db: DBSession, current_user: AdminUser):
    """List all users. Admin only."""
    return db.query(User).order_by(User.created_at.desc(), User.email).all()


@router.get("/me", response_model=UserResponse)
def get_current_user_profile(current_user: CurrentUser):
    return current_user


@router.patch("/me", response_model=UserResponse)
def update_current_user_profile(user_update: UserUpdate, db: DBSession, current_user: CurrentUser):
    """Update your own name or avatar. Role and active status are admin-managed."""
    if user_update.role is not None or user_update.is_active is not None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required",
        )
    for field, value in user_update.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    db.commit()
    db.refresh(current_user)
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: UUID, db: DBSession, current_user: AdminUser):
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )
    return user


@router.patch("/{user_id}", response_model=UserResponse)
def update_user(user_id: UUID, user_update: UserUpdate, db: DBSession, current_user: AdminUser):
    """
    Update a user's profile, role or active status. Admin only.
    Admins cannot demote or deactivate themselves.
    """
    user = db.get(User, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    if user.id == current_user.id:
        if user_update.is_active is False:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot deactivate your own account"
            )
        if user_update.role is not None and user_update.role != UserRole.ADMIN:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot remove your own admin role"
            )

    for field, value in user_update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: UUID, db: DBSession, current_user: AdminUser):
    """Delete a user with their notebooks and grants. Admins cannot delete themselves."""
    if user_id == current_user.id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account"
        )

    user = db.get(User, user_id)
    if user:
        db.delete(user)
        db.commit()
    return None
