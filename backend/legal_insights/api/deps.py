# backend/legal_insights/api/deps.py
import hmac
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from legal_insights.config import get_settings
from legal_insights.database import get_db
from legal_insights.models.notebook import Notebook
from legal_insights.models.user import User
from legal_insights.services.notebook_service import NotebookService
from legal_insights.services.storage_service import StorageService, get_storage_service
from legal_insights.services.workflow_client import WorkflowClient, get_workflow_client
from legal_insights.utils.security import decode_access_token

security = HTTPBearer()


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    """Extract and validate user from JWT token."""
    token = credentials.credentials
    user_id = decode_access_token(token)

    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is deactivated",
        )

    return user


def require_admin():
    """Require user to have admin role."""
    def checker(current_user: Annotated[User, Depends(get_current_user)]) -> User:
        if not current_user.is_admin:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Administrator access required",
            )
        return current_user
    return checker


def get_accessible_notebook(
    notebook_id: UUID,
    db: Annotated[Session, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> Notebook:
    """Load a notebook from the path, raising 404/403 unless the user may read it."""
    return NotebookService(db).get_accessible(current_user, notebook_id)


def verify_workflow_secret(authorization: Annotated[Optional[str], Header()] = None) -> None:
    """Authenticate callbacks from the workflow engine by its shared secret."""
    expected = get_settings().workflow_auth
    if not expected:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Workflow auth secret is not configured",
        )
    if not authorization or not hmac.compare_digest(authorization.encode(), expected.encode()):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid workflow credentials",
        )


def ensure_can_manage(notebook: Notebook, user: User) -> None:
    """Admins and the notebook owner may change a notebook's contents and settings."""
    if not user.is_admin and notebook.owner_user_id != user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only the notebook owner or an administrator can do this",
        )


# Type aliases for common dependencies
CurrentUser = Annotated[User, Depends(get_current_user)]
AdminUser = Annotated[User, Depends(require_admin())]
DBSession = Annotated[Session, Depends(get_db)]
AccessibleNotebook = Annotated[Notebook, Depends(get_accessible_notebook)]
Storage = Annotated[StorageService, Depends(get_storage_service)]
Workflow = Annotated[WorkflowClient, Depends(get_workflow_client)]
WorkflowCaller = Depends(verify_workflow_secret)
