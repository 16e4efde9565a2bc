# backend/legal_insights/schemas/notebook.py
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from legal_insights.models.notebook import AudioStatus, GenerationStatus
from legal_insights.models.source import ProcessingStatus, SourceType
from legal_insights.schemas.tag import TagSummary


class NotebookBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: bool = False
    icon: Optional[str] = Field(None, max_length=16)
    color: Optional[str] = Field(None, max_length=32)


class NotebookCreate(NotebookBase):
    tag_ids: List[UUID] = []


class NotebookUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_public: Optional[bool] = None
    icon: Optional[str] = Field(None, max_length=16)
    color: Optional[str] = Field(None, max_length=32)
    example_questions: Optional[List[str]] = None


class NotebookTagsUpdate(BaseModel):
    tag_ids: List[UUID]


class NotebookResponse(NotebookBase):
    id: UUID
    owner_user_id: UUID
    generation_status: GenerationStatus
    example_questions: Optional[List[str]] = None
    audio_overview_generation_status: Optional[AudioStatus] = None
    audio_overview_url: Optional[str] = None
    audio_url_expires_at: Optional[datetime] = None
    tags: List[TagSummary] = []
    source_count: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SourceCreate(BaseModel):
    type: SourceType
    title: str = Field(..., min_length=1, max_length=255)
    url: Optional[str] = None
    content: Optional[str] = None


class SourceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    display_name: Optional[str] = Field(None, max_length=255)


class SourceTagsUpdate(BaseModel):
    tag_ids: List[UUID]


class SourceStatusUpdate(BaseModel):
    """Ingestion result posted by the workflow engine."""
    processing_status: ProcessingStatus
    content: Optional[str] = None
    summary: Optional[str] = None


class SourceResponse(BaseModel):
    id: UUID
    notebook_id: UUID
    type: SourceType
    title: str
    display_name: Optional[str]
    url: Optional[str]
    file_path: Optional[str]
    file_size: Optional[int]
    summary: Optional[str]
    processing_status: ProcessingStatus
    tag_ids: List[UUID] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NoteCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(..., min_length=1)
    source_type: Optional[str] = "user"
    extracted_text: Optional[str] = None


class NoteUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None


class NoteResponse(BaseModel):
    id: UUID
    notebook_id: UUID
    user_id: UUID
    title: str
    content: str
    source_type: Optional[str]
    extracted_text: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AudioCallback(BaseModel):
    """Audio generation result posted by the workflow engine."""
    status: str  # 'success' or 'failed'
    object_name: Optional[str] = None
    error: Optional[Any] = None


class NotebookStatus(BaseModel):
    """Snapshot pushed over the notebook status websocket."""
    notebook_id: UUID
    generation_status: GenerationStatus
    audio_overview_generation_status: Optional[AudioStatus]
    audio_overview_url: Optional[str]
    audio_url_expires_at: Optional[datetime]
    sources: List[dict]
