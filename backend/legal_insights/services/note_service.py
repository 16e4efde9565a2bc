# backend/legal_insights/services/note_service.py
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from legal_insights.models.note import Note
from legal_insights.models.notebook import Notebook
from legal_insights.models.user import User
from legal_insights.services.errors import AccessDenied, NotFound, ValidationFailed


class NoteService:
    def __init__(self, db: Session):
        self.db = db

    def list_notes(self, notebook: Notebook) -> List[Note]:
        return self.db.query(Note).filter(
            Note.notebook_id == notebook.id
        ).order_by(Note.updated_at.desc(), Note.id).all()

    def find(self, notebook: Notebook, note_id: UUID) -> Optional[Note]:
        return self.db.query(Note).filter(Note.id == note_id, Note.notebook_id == notebook.id).first()

    def get(self, notebook: Notebook, note_id: UUID) -> Note:
        note = self.find(notebook, note_id)
        if note is None:
            raise NotFound("Note not found")
        return note

    def create(
        self,
        notebook: Notebook,
        author: User,
        title: str,
        content: str,
        source_type: Optional[str] = "user",
        extracted_text: Optional[str] = None,
    ) -> Note:
        if not (title or "").strip():
            raise ValidationFailed("Note title is required")
        if not (content or "").strip():
            raise ValidationFailed("Note content is required")
        note = Note(
            notebook_id=notebook.id,
            user_id=author.id,
            title=title.strip(),
            content=content,
            source_type=source_type,
            extracted_text=extracted_text,
        )
        self.db.add(note)
        self.db.commit()
        self.db.refresh(note)
        return note

    def update(self, note: Note, actor: User, **changes) -> Note:
        self._ensure_can_edit(note, actor)
        for field, value in changes.items():
            setattr(note, field, value)
        self.db.commit()
        self.db.refresh(note)
        return note

    def delete(self, note: Note, actor: User) -> None:
        self._ensure_can_edit(note, actor)
        self.db.delete(note)
        self.db.commit()

    @staticmethod
    def _ensure_can_edit(note: Note, actor: User) -> None:
        if note.user_id != actor.id and not actor.is_admin:
            raise AccessDenied("Only the author can change this note")
