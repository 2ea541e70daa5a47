"""
User profile and device token operations
"""
import logging
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import Forbidden, NotFound
from app.models.user import FCMToken, User
from app.schemas.user import UserResponse, UserSummary, UserUpdate
from app.utils.time_utils import utc_now

logger = logging.getLogger(__name__)


def user_summary(user: User) -> Dict[str, Any]:
    """Public profile dict embedded in socket/push/HTTP payloads"""
    return UserSummary.model_validate(user).to_json()


class UserService:
    """Service for user profile operations"""

    def list_users(self, db: Session) -> List[UserResponse]:
        users = db.query(User).order_by(User.created_at.desc()).all()
        return [UserResponse.model_validate(u) for u in users]

    def get_user(self, db: Session, user_id: UUID) -> User:
        user = db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFound("User not found")
        return user

    def update_user(self, db: Session, current_user: User, user_id: UUID, update: UserUpdate) -> User:
        """Update a profile; users may only edit their own"""
        user = self.get_user(db, user_id)
        if user.id != current_user.id:
            raise Forbidden("Not authorized to update this profile")

        for field, value in update.model_dump(exclude_unset=True).items():
            if field == "name" and not value:
                continue
            setattr(user, field, value)

        user.updated_at = utc_now()
        db.commit()
        db.refresh(user)
        logger.info(f"Updated profile for user: {user.id}")
        return user

    def register_fcm_token(self, db: Session, user: User, fcm_token: str, platform: str) -> FCMToken:
        """Attach a device token to the user, moving it from any previous owner"""
        entry = db.query(FCMToken).filter(FCMToken.fcm_token == fcm_token).first()
        if entry:
            entry.user_id = user.id
            entry.platform = platform
            entry.updated_at = utc_now()
        else:
            entry = FCMToken(user_id=user.id, fcm_token=fcm_token, platform=platform)
            db.add(entry)
        db.commit()
        db.refresh(entry)
        logger.info(f"Registered FCM token for user: {user.id}")
        return entry

    def clear_fcm_tokens(self, db: Session, user: User, fcm_token: Optional[str] = None) -> int:
        """Forget one device token, or all of the user's tokens"""
        query = db.query(FCMToken).filter(FCMToken.user_id == user.id)
        if fcm_token:
            query = query.filter(FCMToken.fcm_token == fcm_token)
        removed = query.delete(synchronize_session=False)
        db.commit()
        return removed

    def get_fcm_tokens(self, db: Session, user_id: UUID) -> List[str]:
        rows = db.query(FCMToken.fcm_token).filter(FCMToken.user_id == user_id).all()
        return [row[0] for row in rows]


user_service = UserService()
