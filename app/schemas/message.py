"""Direct message schemas"""
from datetime import datetime
from typing import Optional
from uuid import UUID
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class MessageCreate(CamelModel):
    recipient_id: Optional[UUID] = None
    content: Optional[str] = None


class MessageResponse(CamelModel):
    id: UUID
    sender: UserSummary
    recipient: UserSummary
    content: str
    read: bool
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class ConversationSummary(CamelModel):
    """Latest message exchanged with one peer"""
    user: UserSummary
    last_message: MessageResponse
    unread_count: int = 0
