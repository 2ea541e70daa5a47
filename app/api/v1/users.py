"""
User management endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from uuid import UUID
from app.database import get_db
from app.schemas.user import FCMTokenRegister, UserResponse, UserUpdate
from app.core.dependencies import get_current_user
from app.models.user import User
from app.services.user_service import user_service
from app.utils.responses import success_response
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("")
async def list_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """List all users"""
    users = user_service.list_users(db)
    return success_response(count=len(users), users=[u.to_json() for u in users])


@router.post("/me/fcm-token")
async def register_fcm_token(
    payload: FCMTokenRegister,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Register a device token for push notifications

    A token already registered to another account is moved to the caller.
    """
    user_service.register_fcm_token(db, current_user, payload.fcm_token, payload.platform)
    logger.info(f"FCM token registered for user {current_user.id}")
    return success_response("FCM token registered successfully")


@router.get("/{user_id}")
async def get_user(
    user_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a user's profile by ID"""
    user = user_service.get_user(db, user_id)
    return success_response(user=UserResponse.model_validate(user).to_json())


@router.put("/{user_id}")
async def update_user(
    user_id: UUID,
    update: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update own profile (name, phone, avatar)"""
    user = user_service.update_user(db, current_user, user_id, update)
    logger.info(f"Profile updated: {user.id}")
    return success_response(user=UserResponse.model_validate(user).to_json())
