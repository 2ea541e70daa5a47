"""
Direct message endpoints
"""
from uuid import UUID
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.core.dependencies import get_current_user
from app.schemas.message import MessageCreate
from app.services.message_service import message_service
from app.utils.responses import success_response

router = APIRouter()


@router.get("")
async def get_conversations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Latest message and unread count per conversation"""
    conversations = message_service.get_conversations(db, current_user)
    return success_response(
        count=len(conversations),
        conversations=[c.to_json() for c in conversations],
    )


@router.get("/unread/count")
async def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return success_response(count=message_service.get_unread_count(db, current_user))


@router.get("/{user_id}")
async def get_conversation(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Last 50 messages with a friend, oldest first"""
    messages = message_service.get_conversation(db, current_user, user_id)
    return success_response(count=len(messages), messages=[m.to_json() for m in messages])


@router.post("")
async def send_message(
    payload: MessageCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Send a message to a friend"""
    sent = message_service.send_message(db, current_user, payload.recipient_id, payload.content)
    return success_response(message=sent.to_json())


@router.put("/{user_id}/read")
async def mark_as_read(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark all messages from a user as read"""
    count = message_service.mark_as_read(db, current_user, user_id)
    return success_response("Messages marked as read", count=count)
