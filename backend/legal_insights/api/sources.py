# backend/legal_insights/api/sources.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, File, UploadFile, status

from legal_insights.api.deps import (
    AccessibleNotebook, AdminUser, CurrentUser, DBSession, Storage, WorkflowCaller, ensure_can_manage,
)
from legal_insights.schemas.notebook import (
    SourceCreate, SourceResponse, SourceStatusUpdate, SourceTagsUpdate, SourceUpdate,
)
from legal_insights.services.source_service import SourceService

router = APIRouter(prefix="/notebooks/{notebook_id}/sources", tags=["Sources"])


@router.get("", response_model=List[SourceResponse])
def list_sources(notebook: AccessibleNotebook, db: DBSession):
    return SourceService(db).list_sources(notebook)


@router.post("", response_model=SourceResponse, status_code=status.HTTP_201_CREATED)
def create_source(source_data: SourceCreate, notebook: AccessibleNotebook, db: DBSession, current_user: CurrentUser):
    """Add a text, website or YouTube source. Files go through /upload."""
    ensure_can_manage(notebook, current_user)
    return SourceService(db).create(notebook, **source_data.model_dump())


@router.post("/upload", response_model=SourceResponse, status_code=status.HTTP_201_CREATED)
def upload_source(
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: CurrentUser,
    storage: Storage,
    file: UploadFile = File(...),
):
    ensure_can_manage(notebook, current_user)
    return SourceService(db).upload(notebook, file.filename, file.content_type, file.file, storage)


@router.get("/{source_id}", response_model=SourceResponse)
def get_source(source_id: UUID, notebook: AccessibleNotebook, db: DBSession):
    return SourceService(db).get(notebook, source_id)


@router.patch("/{source_id}", response_model=SourceResponse)
def update_source(
    source_id: UUID,
    source_data: SourceUpdate,
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: CurrentUser,
):
    ensure_can_manage(notebook, current_user)
    service = SourceService(db)
    changes = {k: v for k, v in source_data.model_dump(exclude_unset=True).items() if v is not None}
    return service.update(service.get(notebook, source_id), **changes)


@router.delete("/{source_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_source(
    source_id: UUID,
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: CurrentUser,
    storage: Storage,
):
    ensure_can_manage(notebook, current_user)
    service = SourceService(db)
    source = service.find(notebook, source_id)
    if source is not None:
        service.delete(source, storage)


@router.put("/{source_id}/tags", response_model=SourceResponse)
def set_source_tags(
    source_id: UUID,
    tags: SourceTagsUpdate,
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: AdminUser,
):
    service = SourceService(db)
    return service.set_tags(service.get(notebook, source_id), tags.tag_ids, current_user)


@router.post(
    "/{source_id}/status",
    response_model=SourceResponse,
    dependencies=[WorkflowCaller],
)
def record_source_status(notebook_id: UUID, source_id: UUID, update: SourceStatusUpdate, db: DBSession):
    """Ingestion result reported by the workflow engine."""
    return SourceService(db).record_processing(
        source_id, update.processing_status, content=update.content, summary=update.summary,
        notebook_id=notebook_id,
    )
