"""
Social service for managing friends and friend requests
"""
import logging
from enum import Enum
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound
from app.models.social import Friendship, FriendshipStatus
from app.models.user import User
from app.schemas.social import (
    FriendInfo,
    FriendRequestWithUser,
    FriendshipResponse,
    QRCodeLink,
)
from app.schemas.user import UserSummary
from app.services.notification_service import NotificationService, notification_service
from app.services.user_service import user_service, user_summary
from app.utils import socket_events
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


class FriendRequestOutcome(str, Enum):
    SENT = "sent"
    AUTO_ACCEPTED = "auto_accepted"
    REVIVED = "revived"


OUTCOME_MESSAGES = {
    FriendRequestOutcome.SENT: "Friend request sent",
    FriendRequestOutcome.AUTO_ACCEPTED: "Friend request accepted",
    FriendRequestOutcome.REVIVED: "Friend request sent",
}


class SocialService:
    """Service for social/friend operations"""

    def __init__(self, notifier: Optional[NotificationService] = None):
        self.notifier = notifier or notification_service

    def _find_between(self, db: Session, user_a: UUID, user_b: UUID) -> Optional[Friendship]:
        return db.query(Friendship).filter(
            or_(
                and_(Friendship.requester_id == user_a, Friendship.recipient_id == user_b),
                and_(Friendship.requester_id == user_b, Friendship.recipient_id == user_a),
            )
        ).first()

    def _get_friendship(self, db: Session, friendship_id: UUID, not_found: str) -> Friendship:
        friendship = db.query(Friendship).filter(Friendship.id == friendship_id).first()
        if not friendship:
            raise NotFound(not_found)
        return friendship

    def _commit(self, db: Session) -> None:
        # The unique index is the only guard against two racing first requests
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise Conflict("Friend request already exists")

    def send_friend_request(
        self,
        db: Session,
        requester: User,
        recipient_id: Optional[UUID],
        missing_message: str = "Recipient ID is required",
        self_message: str = "Cannot send friend request to yourself",
        not_found_message: str = "Recipient not found",
    ) -> Tuple[Friendship, FriendRequestOutcome]:
        """
        Send a friend request, applying the friendship lifecycle.

        A reciprocal pending request is accepted on the spot and a rejected
        record is reused with the new direction.

        Returns: (friendship, outcome)
        """
        if not recipient_id:
            raise InvalidArgument(missing_message)
        if recipient_id == requester.id:
            raise InvalidArgument(self_message)

        recipient = db.query(User).filter(User.id == recipient_id).first()
        if not recipient:
            raise NotFound(not_found_message)

        existing = self._find_between(db, requester.id, recipient.id)

        if existing:
            if existing.status == FriendshipStatus.ACCEPTED:
                raise Conflict("Already friends")

            if existing.status == FriendshipStatus.PENDING:
                if existing.requester_id == requester.id:
                    raise Conflict("Friend request already sent")
                # They already sent us a request - accept it
                existing.status = FriendshipStatus.ACCEPTED.value
                existing.updated_at = utc_now()
                self._commit(db)
                db.refresh(existing)
                logger.info(f"Friendship {existing.id} auto-accepted by {requester.id}")
                self._announce_accepted(db, existing, requester)
                return existing, FriendRequestOutcome.AUTO_ACCEPTED

            existing.requester_id = requester.id
            existing.recipient_id = recipient.id
            existing.status = FriendshipStatus.PENDING.value
            existing.updated_at = utc_now()
            self._commit(db)
            db.refresh(existing)
            logger.info(f"Friendship {existing.id} revived: {requester.id} -> {recipient.id}")
            self._announce_request(db, existing, requester, recipient)
            return existing, FriendRequestOutcome.REVIVED

        friendship = Friendship(
            requester_id=requester.id,
            recipient_id=recipient.id,
            status=FriendshipStatus.PENDING.value,
        )
        db.add(friendship)
        self._commit(db)
        db.refresh(friendship)

        logger.info(f"Friend request {friendship.id}: {requester.id} -> {recipient.id}")
        self._announce_request(db, friendship, requester, recipient)
        return friendship, FriendRequestOutcome.SENT

    def add_friend_from_qr(
        self, db: Session, requester: User, user_id: Optional[UUID]
    ) -> Tuple[Friendship, FriendRequestOutcome]:
        """Friend request issued by scanning another user's QR code"""
        return self.send_friend_request(
            db,
            requester,
            user_id,
            missing_message="User ID is required",
            self_message="Cannot add yourself as friend",
            not_found_message="User not found",
        )

    def get_qr_code_link(self, user_id: UUID) -> QRCodeLink:
        return QRCodeLink(
            qr_link=f"{settings.FRONTEND_URL}/add-friend?userId={user_id}",
            user_id=user_id,
        )

    def accept_friend_request(self, db: Session, user: User, request_id: UUID) -> Friendship:
        """Accept a pending request addressed to the user"""
        friendship = self._get_friendship(db, request_id, "Friend request not found")

        if friendship.recipient_id != user.id:
            raise Forbidden("Not authorized to accept this request")
        if friendship.status != FriendshipStatus.PENDING:
            raise InvalidState("Friend request is not pending")

        friendship.status = FriendshipStatus.ACCEPTED.value
        friendship.updated_at = utc_now()
        db.commit()
        db.refresh(friendship)

        logger.info(f"Friend request {friendship.id} accepted by {user.id}")
        self._announce_accepted(db, friendship, user)
        return friendship

    def reject_friend_request(self, db: Session, user: User, request_id: UUID) -> Friendship:
        """Reject a pending request addressed to the user (no one is notified)"""
        friendship = self._get_friendship(db, request_id, "Friend request not found")

        if friendship.recipient_id != user.id:
            raise Forbidden("Not authorized to reject this request")
        if friendship.status != FriendshipStatus.PENDING:
            raise InvalidState("Friend request is not pending")

        friendship.status = FriendshipStatus.REJECTED.value
        friendship.updated_at = utc_now()
        db.commit()
        db.refresh(friendship)

        logger.info(f"Friend request {friendship.id} rejected by {user.id}")
        return friendship

    def get_friends(self, db: Session, user_id: UUID) -> List[FriendInfo]:
        """Accepted friendships seen from the user's side, newest update first"""
        friendships = db.query(Friendship).filter(
            Friendship.status == FriendshipStatus.ACCEPTED.value,
            or_(Friendship.requester_id == user_id, Friendship.recipient_id == user_id),
        ).order_by(Friendship.updated_at.desc()).all()

        others = self._load_users(db, [f.other_party(user_id) for f in friendships])

        friends = []
        for friendship in friendships:
            other = others.get(friendship.other_party(user_id))
            if not other:
                continue
            friends.append(FriendInfo(
                **UserSummary.model_validate(other).model_dump(),
                friendship_id=friendship.id,
                created_at=friendship.created_at,
                updated_at=friendship.updated_at,
            ))
        return friends

    def get_pending_requests(self, db: Session, user_id: UUID) -> List[FriendRequestWithUser]:
        """Incoming pending requests with the requester's profile, newest first"""
        requests = db.query(Friendship).filter(
            Friendship.recipient_id == user_id,
            Friendship.status == FriendshipStatus.PENDING.value,
        ).order_by(Friendship.created_at.desc()).all()

        requesters = self._load_users(db, [r.requester_id for r in requests])
        return [
            self._request_with_user(r, requesters[r.requester_id])
            for r in requests
            if r.requester_id in requesters
        ]

    def remove_friend(self, db: Session, user: User, friendship_id: UUID) -> None:
        """Delete an accepted friendship; either party may do so"""
        friendship = self._get_friendship(db, friendship_id, "Friendship not found")

        if not friendship.involves(user.id):
            raise Forbidden("Not authorized to delete this friendship")
        if friendship.status != FriendshipStatus.ACCEPTED:
            raise InvalidState("Can only delete accepted friendships")

        other_id = friendship.other_party(user.id)
        removed_id = str(friendship.id)
        db.delete(friendship)
        db.commit()

        logger.info(f"Friendship {removed_id} removed by {user.id}")
        self.notifier.emit_to_users(
            [user.id], socket_events.FRIEND_REMOVED,
            {"friendshipId": removed_id, "userId": str(other_id)},
        )
        self.notifier.emit_to_users(
            [other_id], socket_events.FRIEND_REMOVED,
            {"friendshipId": removed_id, "userId": str(user.id)},
        )

    def are_friends(self, db: Session, user_a: UUID, user_b: UUID) -> bool:
        friendship = self._find_between(db, user_a, user_b)
        return friendship is not None and friendship.status == FriendshipStatus.ACCEPTED

    def get_friend_ids(self, db: Session, user_id: UUID) -> List[UUID]:
        friendships = db.query(Friendship).filter(
            Friendship.status == FriendshipStatus.ACCEPTED.value,
            or_(Friendship.requester_id == user_id, Friendship.recipient_id == user_id),
        ).all()
        return [f.other_party(user_id) for f in friendships]

    # Fan-out

    def _announce_request(self, db: Session, friendship: Friendship, requester: User, recipient: User) -> None:
        payload = {"request": self._request_with_user(friendship, requester).to_json()}
        self.notifier.emit_to_users([recipient.id], socket_events.FRIEND_REQUEST_RECEIVED, payload)
        self.notifier.push_friend_request(
            user_service.get_fcm_tokens(db, recipient.id),
            user_summary(requester),
            str(friendship.id),
        )

    def _announce_accepted(self, db: Session, friendship: Friendship, accepter: User) -> None:
        requester = db.query(User).filter(User.id == friendship.other_party(accepter.id)).first()
        if not requester:
            return

        record = FriendshipResponse.model_validate(friendship).to_json()
        accepter_profile = user_summary(accepter)
        requester_profile = user_summary(requester)

        self.notifier.emit_to_users(
            [requester.id], socket_events.FRIEND_REQUEST_ACCEPTED,
            {"friendship": record, "friend": accepter_profile},
        )
        self.notifier.emit_to_users(
            [requester.id], socket_events.FRIEND_ADDED,
            {"friendship": record, "friend": accepter_profile},
        )
        self.notifier.emit_to_users(
            [accepter.id], socket_events.FRIEND_ADDED,
            {"friendship": record, "friend": requester_profile},
        )
        self.notifier.push_friend_request_accepted(
            user_service.get_fcm_tokens(db, requester.id),
            accepter_profile,
        )

    @staticmethod
    def _request_with_user(friendship: Friendship, requester: User) -> FriendRequestWithUser:
        return FriendRequestWithUser(
            **FriendshipResponse.model_validate(friendship).model_dump(),
            requester=UserSummary.model_validate(requester),
        )

    @staticmethod
    def _load_users(db: Session, user_ids: List[UUID]) -> Dict[UUID, User]:
        if not user_ids:
            return {}
        users = db.query(User).filter(User.id.in_(set(user_ids))).all()
        return {u.id: u for u in users}


social_service = SocialService()
