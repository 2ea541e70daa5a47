"""
Direct messaging between friends
"""
import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session, joinedload

from app.core.exceptions import Forbidden, InvalidArgument, NotFound
from app.models.message import Message
from app.models.user import User
from app.schemas.message import ConversationSummary, MessageResponse
from app.schemas.user import UserSummary
from app.services.notification_service import NotificationService, notification_service
from app.services.social_service import SocialService, social_service
from app.services.user_service import user_service
from app.utils import socket_events
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)

CONVERSATION_LIMIT = 50


class MessageService:
    """Service for direct messages"""

    def __init__(self, notifier: Optional[NotificationService] = None,
                 social: Optional[SocialService] = None):
        self.notifier = notifier or notification_service
        self.social = social or social_service

    def _broadcast(self, event: str, payload: Dict, sender_id: UUID, recipient_id: UUID) -> None:
        self.notifier.emit(event, payload, socket_events.MESSAGES_ROOM)
        self.notifier.emit_to_users([recipient_id, sender_id], event, payload)

    def send_message(self, db: Session, sender: User, recipient_id: Optional[UUID],
                     content: Optional[str]) -> MessageResponse:
        if not recipient_id or not content or not content.strip():
            raise InvalidArgument("Recipient ID and content are required")
        if recipient_id == sender.id:
            raise InvalidArgument("Cannot send message to yourself")

        recipient = db.query(User).filter(User.id == recipient_id).first()
        if not recipient:
            raise NotFound("Recipient not found")

        if not self.social.are_friends(db, sender.id, recipient.id):
            raise Forbidden("You can only send messages to your friends")

        message = Message(sender_id=sender.id, recipient_id=recipient.id, content=content.strip())
        db.add(message)
        db.commit()
        db.refresh(message)

        logger.info(f"Message {message.id} sent: {sender.id} -> {recipient.id}")

        response = MessageResponse.model_validate(message)
        self._broadcast(
            socket_events.MESSAGE_SENT,
            {
                "message": response.to_json(),
                "senderId": str(sender.id),
                "recipientId": str(recipient.id),
            },
            sender.id,
            recipient.id,
        )
        self.notifier.push_message(
            user_service.get_fcm_tokens(db, recipient.id),
            sender.name,
            message.content,
            {
                "messageId": str(message.id),
                "senderId": str(sender.id),
                "recipientId": str(recipient.id),
            },
        )
        return response

    def get_conversation(self, db: Session, user: User, other_user_id: UUID) -> List[MessageResponse]:
        """Last messages exchanged with a friend, oldest first"""
        if not self.social.are_friends(db, user.id, other_user_id):
            raise Forbidden("You can only view messages with your friends")

        messages = db.query(Message).options(
            joinedload(Message.sender), joinedload(Message.recipient)
        ).filter(
            or_(
                and_(Message.sender_id == user.id, Message.recipient_id == other_user_id),
                and_(Message.sender_id == other_user_id, Message.recipient_id == user.id),
            )
        ).order_by(Message.created_at.desc()).limit(CONVERSATION_LIMIT).all()

        messages.reverse()
        return [MessageResponse.model_validate(m) for m in messages]

    def get_conversations(self, db: Session, user: User) -> List[ConversationSummary]:
        """One entry per peer with the latest message and the unread count, newest first"""
        messages = db.query(Message).options(
            joinedload(Message.sender), joinedload(Message.recipient)
        ).filter(
            or_(Message.sender_id == user.id, Message.recipient_id == user.id)
        ).order_by(Message.created_at.desc()).all()

        conversations: Dict[UUID, ConversationSummary] = {}
        for message in messages:
            other = message.recipient if message.sender_id == user.id else message.sender
            summary = conversations.get(other.id)
            if summary is None:
                summary = ConversationSummary(
                    user=UserSummary.model_validate(other),
                    last_message=MessageResponse.model_validate(message),
                )
                conversations[other.id] = summary
            if message.recipient_id == user.id and not message.read:
                summary.unread_count += 1

        return list(conversations.values())

    def mark_as_read(self, db: Session, user: User, sender_id: UUID) -> int:
        """Mark every unread message from sender to user as read; returns how many changed"""
        count = db.query(Message).filter(
            Message.sender_id == sender_id,
            Message.recipient_id == user.id,
            Message.read.is_(False),
        ).update(
            {Message.read: True, Message.read_at: utc_now(), Message.updated_at: utc_now()},
            synchronize_session=False,
        )
        db.commit()

        logger.info(f"Marked {count} message(s) from {sender_id} as read for {user.id}")
        self._broadcast(
            socket_events.MESSAGES_READ,
            {"senderId": str(sender_id), "recipientId": str(user.id), "count": count},
            sender_id,
            user.id,
        )
        return count

    def get_unread_count(self, db: Session, user: User) -> int:
        return db.query(Message).filter(
            Message.recipient_id == user.id,
            Message.read.is_(False),
        ).count()


message_service = MessageService()
