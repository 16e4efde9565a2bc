# backend/legal_insights/schemas/__init__.py
from legal_insights.schemas.user import UserBase, UserCreate, UserUpdate, UserResponse
from legal_insights.schemas.auth import LoginRequest, TokenResponse
from legal_insights.schemas.tag import TagCreate, TagUpdate, TagResponse, TagSummary, TagWithCounts
from legal_insights.schemas.permission import PermissionGrant, PermissionResponse, PurgeResponse
from legal_insights.schemas.notebook import (
    NotebookCreate, NotebookUpdate, NotebookResponse, NotebookTagsUpdate,
    SourceCreate, SourceUpdate, SourceResponse, NoteCreate, NoteUpdate, NoteResponse,
)
from legal_insights.schemas.chat import ChatMessageRequest, ChatHistoryItem
from legal_insights.schemas.stats import AdminStats

__all__ = [
    "UserBase", "UserCreate", "UserUpdate", "UserResponse",
    "LoginRequest", "TokenResponse",
    "TagCreate", "TagUpdate", "TagResponse", "TagSummary", "TagWithCounts",
    "PermissionGrant", "PermissionResponse", "PurgeResponse",
    "NotebookCreate", "NotebookUpdate", "NotebookResponse", "NotebookTagsUpdate",
    "SourceCreate", "SourceUpdate", "SourceResponse", "NoteCreate", "NoteUpdate", "NoteResponse",
    "ChatMessageRequest", "ChatHistoryItem",
    "AdminStats",
]
