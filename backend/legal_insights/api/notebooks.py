# backend/legal_insights/api/notebooks.py
import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Query, status

from legal_insights.api.deps import (
    AccessibleNotebook, AdminUser, CurrentUser, DBSession, Storage, WorkflowCaller, ensure_can_manage,
)
from legal_insights.config import get_settings
from legal_insights.models.notebook import Notebook
from legal_insights.schemas.notebook import (
    AudioCallback, NotebookCreate, NotebookResponse, NotebookTagsUpdate, NotebookUpdate,
)
from legal_insights.services.audio_service import AudioOverviewService
from legal_insights.services.notebook_service import NotebookService
from legal_insights.services.storage_service import StorageService
from legal_insights.tasks import generate_audio_overview_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notebooks", tags=["Notebooks"])


@router.get("", response_model=List[NotebookResponse])
def list_notebooks(
    db: DBSession,
    current_user: CurrentUser,
    order: str = Query("recent", pattern="^(recent|title)$"),
):
    """
    List notebooks visible to the current user.

    Visibility rules:
    - Admins see ALL notebooks
    - Users see notebooks they own and public notebooks
    - Users see notebooks carrying a tag they hold a non-expired grant for
    """
    return NotebookService(db).list_visible(current_user, order=order)


@router.post("", response_model=NotebookResponse, status_code=status.HTTP_201_CREATED)
def create_notebook(notebook_data: NotebookCreate, db: DBSession, current_user: AdminUser):
    data = notebook_data.model_dump()
    return NotebookService(db).create(
        owner=current_user,
        title=data.pop("title"),
        description=data.pop("description"),
        is_public=data.pop("is_public"),
        tag_ids=data.pop("tag_ids"),
        **data,
    )


@router.get("/{notebook_id}", response_model=NotebookResponse)
def get_notebook(notebook: AccessibleNotebook):
    return notebook


@router.patch("/{notebook_id}", response_model=NotebookResponse)
def update_notebook(
    notebook_data: NotebookUpdate,
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: CurrentUser,
):
    ensure_can_manage(notebook, current_user)
    return NotebookService(db).update(notebook, **notebook_data.model_dump(exclude_unset=True))


@router.delete("/{notebook_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_notebook(notebook_id: UUID, db: DBSession, current_user: AdminUser, storage: Storage):
    """Delete a notebook with its sources, notes and stored files. Absent notebooks are a no-op."""
    notebook = db.get(Notebook, notebook_id)
    if notebook is None:
        return None
    _remove_stored_files(notebook, storage)
    NotebookService(db).delete(notebook_id)


def _remove_stored_files(notebook: Notebook, storage: StorageService) -> None:
    for source in notebook.sources:
        if source.file_path:
            storage.delete_file(storage.sources_bucket, source.file_path)
    if notebook.audio_object_name:
        storage.delete_file(storage.audio_bucket, notebook.audio_object_name)


# ============================================================================
# Notebook Tags
# ============================================================================

@router.put("/{notebook_id}/tags", response_model=NotebookResponse)
def set_notebook_tags(notebook_id: UUID, tags: NotebookTagsUpdate, db: DBSession, current_user: AdminUser):
    service = NotebookService(db)
    return service.set_tags(service.get(notebook_id), tags.tag_ids, current_user)


@router.post("/{notebook_id}/tags/{tag_id}", response_model=NotebookResponse)
def add_notebook_tag(notebook_id: UUID, tag_id: UUID, db: DBSession, current_user: AdminUser):
    service = NotebookService(db)
    return service.add_tag(service.get(notebook_id), tag_id, current_user)


@router.delete("/{notebook_id}/tags/{tag_id}", response_model=NotebookResponse)
def remove_notebook_tag(notebook_id: UUID, tag_id: UUID, db: DBSession, current_user: AdminUser):
    service = NotebookService(db)
    return service.remove_tag(service.get(notebook_id), tag_id, current_user)


# ============================================================================
# Audio Overview
# ============================================================================

@router.post("/{notebook_id}/audio", response_model=NotebookResponse, status_code=status.HTTP_202_ACCEPTED)
def generate_audio_overview(notebook: AccessibleNotebook, db: DBSession):
    """Start audio overview generation. The workflow engine reports back to the callback."""
    notebook = AudioOverviewService(db).mark_requested(notebook)
    callback_url = f"{get_settings().public_base_url}/api/v1/notebooks/{notebook.id}/audio/callback"
    generate_audio_overview_task.send(str(notebook.id), callback_url)
    return notebook


@router.post("/{notebook_id}/audio/refresh", response_model=NotebookResponse)
def refresh_audio_url(notebook: AccessibleNotebook, db: DBSession, storage: Storage):
    AudioOverviewService(db).refresh_url(notebook, storage, force=True)
    return notebook


@router.post(
    "/{notebook_id}/audio/callback",
    response_model=NotebookResponse,
    dependencies=[WorkflowCaller],
)
def audio_generation_callback(notebook_id: UUID, result: AudioCallback, db: DBSession, storage: Storage):
    success = result.status == "success"
    if not success:
        logger.warning(f"Audio generation failed for notebook {notebook_id}: {result.error}")
    return AudioOverviewService(db).complete(
        notebook_id, success, storage=storage, object_name=result.object_name
    )


@router.delete("/{notebook_id}/audio", response_model=NotebookResponse)
def delete_audio_overview(notebook: AccessibleNotebook, db: DBSession, current_user: CurrentUser, storage: Storage):
    ensure_can_manage(notebook, current_user)
    return AudioOverviewService(db).clear(notebook, storage)
