from typing import Dict

from pydantic import BaseModel


class AdminStats(BaseModel):
    users: int
    admins: int
    notebooks: int
    public_notebooks: int
    sources: int
    sources_by_status: Dict[str, int]
    notes: int
    chat_messages: int
    tags: int
    active_permissions: int
    expired_permissions: int
