# backend/legal_insights/models/__init__.py
from legal_insights.models.base import Base
from legal_insights.models.user import User, UserRole
from legal_insights.models.tag import Tag, TagCategory, NotebookTag, SourceTag
from legal_insights.models.permission import UserPermission
from legal_insights.models.notebook import Notebook, GenerationStatus, AudioStatus
from legal_insights.models.source import Source, SourceType, ProcessingStatus
from legal_insights.models.note import Note
from legal_insights.models.chat import ChatMessage

__all__ = [
    "Base",
    "User", "UserRole",
    "Tag", "TagCategory", "NotebookTag", "SourceTag",
    "UserPermission",
    "Notebook", "GenerationStatus", "AudioStatus",
    "Source", "SourceType", "ProcessingStatus",
    "Note",
    "ChatMessage",
]
