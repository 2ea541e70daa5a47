"""
Social and friends schemas
"""
from datetime import datetime
from typing import Optional
from uuid import UUID
from app.schemas.common import CamelModel
from app.schemas.user import UserSummary


class FriendRequestCreate(CamelModel):
    """Create friend request"""
    recipient_id: Optional[UUID] = None


class FriendScanRequest(CamelModel):
    """Add a friend from a scanned QR code"""
    user_id: Optional[UUID] = None


class FriendshipResponse(CamelModel):
    """Raw friendship record"""
    id: UUID
    requester_id: UUID
    recipient_id: UUID
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class FriendRequestWithUser(FriendshipResponse):
    """Incoming request with the requester's profile"""
    requester: UserSummary


class FriendInfo(UserSummary):
    """The other party of an accepted friendship, with friendship metadata"""
    friendship_id: UUID
    created_at: datetime
    updated_at: Optional[datetime] = None


class QRCodeLink(CamelModel):
    qr_link: str
    user_id: UUID
