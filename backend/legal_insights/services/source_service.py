# backend/legal_insights/services/source_service.py
import logging
import os
from typing import BinaryIO, Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from legal_insights.models.notebook import Notebook
from legal_insights.models.source import ProcessingStatus, Source, SourceType
from legal_insights.models.tag import SourceTag, Tag
from legal_insights.models.user import User
from legal_insights.services.errors import NotFound, ValidationFailed
from legal_insights.services.storage_service import StorageService, source_object_name

logger = logging.getLogger(__name__)

LINK_TYPES = (SourceType.WEBSITE, SourceType.YOUTUBE)


def detect_file_type(filename: str, content_type: Optional[str]) -> SourceType:
    ext = os.path.splitext(filename)[1].lower()
    content_type = (content_type or "").lower()
    if ext == ".pdf" or content_type == "application/pdf":
        return SourceType.PDF
    if content_type.startswith("audio/") or ext in (".mp3", ".wav", ".m4a", ".ogg"):
        return SourceType.AUDIO
    if content_type.startswith("text/") or ext in (".txt", ".md"):
        return SourceType.TEXT
    raise ValidationFailed(f"Unsupported file type: {filename}")


class SourceService:
    def __init__(self, db: Session):
        self.db = db

    def list_sources(self, notebook: Notebook) -> List[Source]:
        return self.db.query(Source).filter(
            Source.notebook_id == notebook.id
        ).order_by(Source.created_at.desc(), Source.id).all()

    def find(self, notebook: Notebook, source_id: UUID) -> Optional[Source]:
        return self.db.query(Source).filter(
            Source.id == source_id,
            Source.notebook_id == notebook.id,
        ).first()

    def get(self, notebook: Notebook, source_id: UUID) -> Source:
        source = self.find(notebook, source_id)
        if source is None:
            raise NotFound("Source not found")
        return source

    def create(
        self,
        notebook: Notebook,
        type: SourceType,
        title: str,
        url: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Source:
        title = (title or "").strip()
        if not title:
            raise ValidationFailed("Source title is required")
        if type in LINK_TYPES and not url:
            raise ValidationFailed(f"A URL is required for {type.value} sources")
        if type == SourceType.TEXT and not (content and content.strip()):
            raise ValidationFailed("Content is required for text sources")
        if type not in LINK_TYPES and type != SourceType.TEXT:
            raise ValidationFailed(f"{type.value} sources must be uploaded as files")

        source = Source(
            notebook_id=notebook.id,
            type=type,
            title=title,
            url=url,
            content=content,
        )
        self.db.add(source)
        self.db.commit()
        self.db.refresh(source)
        logger.info(f"Added {type.value} source {source.id} to notebook {notebook.id}")
        return source

    def upload(
        self,
        notebook: Notebook,
        filename: str,
        content_type: Optional[str],
        file_data: BinaryIO,
        storage: StorageService,
    ) -> Source:
        if not filename:
            raise ValidationFailed("A file name is required")
        source_type = detect_file_type(filename, content_type)
        source_id = uuid4()
        object_name = source_object_name(notebook.id, source_id, os.path.basename(filename))
        file_size = storage.upload_file(
            storage.sources_bucket,
            file_data,
            object_name,
            content_type=content_type or "application/octet-stream",
        )
        source = Source(
            id=source_id,
            notebook_id=notebook.id,
            type=source_type,
            title=filename,
            display_name=filename,
            file_path=object_name,
            file_size=file_size,
        )
        self.db.add(source)
        self.db.commit()
        self.db.refresh(source)
        return source

    def update(self, source: Source, **changes) -> Source:
        for field, value in changes.items():
            setattr(source, field, value)
        self.db.commit()
        self.db.refresh(source)
        return source

    def delete(self, source: Source, storage: Optional[StorageService] = None) -> None:
        if source.file_path and storage is not None:
            storage.delete_file(storage.sources_bucket, source.file_path)
        self.db.delete(source)
        self.db.commit()
        logger.info(f"Deleted source {source.id}")

    def set_tags(self, source: Source, tag_ids: Iterable[UUID], actor: User) -> Source:
        wanted = list(dict.fromkeys(tag_ids))
        if wanted:
            found = {row.id for row in self.db.query(Tag.id).filter(Tag.id.in_(wanted)).all()}
            missing = [str(t) for t in wanted if t not in found]
            if missing:
                raise ValidationFailed(f"Unknown tags: {', '.join(missing)}")
        current = {link.tag_id: link for link in source.tag_links}
        for tag_id, link in current.items():
            if tag_id not in wanted:
                source.tag_links.remove(link)
        for tag_id in wanted:
            if tag_id not in current:
                source.tag_links.append(SourceTag(tag_id=tag_id, created_by=actor.id))
        self.db.commit()
        self.db.refresh(source)
        return source

    def record_processing(
        self,
        source_id: UUID,
        status: ProcessingStatus,
        content: Optional[str] = None,
        summary: Optional[str] = None,
        notebook_id: Optional[UUID] = None,
    ) -> Source:
        """Store the workflow engine's ingestion result for a source."""
        source = self.db.get(Source, source_id)
        if source is None or (notebook_id is not None and source.notebook_id != notebook_id):
            raise NotFound("Source not found")
        source.processing_status = status
        if content is not None:
            source.content = content
        if summary is not None:
            source.summary = summary
        self.db.commit()
        self.db.refresh(source)
        return source
