"""
Social features models - Friendships and friend requests
"""
from enum import Enum
from uuid import uuid4
from sqlalchemy import Column, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.time_utils import utc_now


class FriendshipStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Friendship(Base):
    """
    Relationship record between two users.

    Directional while pending (requester -> recipient), symmetric once
    accepted. At most one row exists per unordered pair of users.
    """
    __tablename__ = "friendships"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    requester_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)

    status = Column(String(20), default=FriendshipStatus.PENDING.value, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    # Unique constraint to prevent duplicate friendships
    __table_args__ = (
        UniqueConstraint('requester_id', 'recipient_id', name='unique_friendship'),
    )

    # Relationships
    requester = relationship("User", foreign_keys=[requester_id])
    recipient = relationship("User", foreign_keys=[recipient_id])

    def involves(self, user_id) -> bool:
        return user_id in (self.requester_id, self.recipient_id)

    def other_party(self, user_id):
        """Id of the user on the other side of this friendship"""
        if user_id == self.requester_id:
            return self.recipient_id
        if user_id == self.recipient_id:
            return self.requester_id
        raise ValueError(f"User {user_id} is not part of friendship {self.id}")
