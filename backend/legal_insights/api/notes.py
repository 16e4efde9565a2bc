# backend/legal_insights/api/notes.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, status

from legal_insights.api.deps import AccessibleNotebook, CurrentUser, DBSession
from legal_insights.schemas.notebook import NoteCreate, NoteResponse, NoteUpdate
from legal_insights.services.note_service import NoteService

router = APIRouter(prefix="/notebooks/{notebook_id}/notes", tags=["Notes"])


@router.get("", response_model=List[NoteResponse])
def list_notes(notebook: AccessibleNotebook, db: DBSession):
    return NoteService(db).list_notes(notebook)


@router.post("", response_model=NoteResponse, status_code=status.HTTP_201_CREATED)
def create_note(note_data: NoteCreate, notebook: AccessibleNotebook, db: DBSession, current_user: CurrentUser):
    return NoteService(db).create(notebook, current_user, **note_data.model_dump())


@router.patch("/{note_id}", response_model=NoteResponse)
def update_note(
    note_id: UUID,
    note_data: NoteUpdate,
    notebook: AccessibleNotebook,
    db: DBSession,
    current_user: CurrentUser,
):
    service = NoteService(db)
    changes = {k: v for k, v in note_data.model_dump(exclude_unset=True).items() if v is not None}
    return service.update(service.get(notebook, note_id), current_user, **changes)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_note(note_id: UUID, notebook: AccessibleNotebook, db: DBSession, current_user: CurrentUser):
    service = NoteService(db)
    note = service.find(notebook, note_id)
    if note is not None:
        service.delete(note, current_user)
