"""
Authentication Service - email/password accounts and JWT management
"""
from typing import Optional
from sqlalchemy.orm import Session
from app.core.exceptions import Conflict, InvalidArgument, NotFound, Unauthorized
from app.core.security import create_access_token, get_password_hash, verify_password
from app.models.user import User
from app.services.user_service import user_service
import logging

logger = logging.getLogger(__name__)


class AuthService:
    """Service for authentication operations"""

    def __init__(self, db: Session):
        self.db = db

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email"""
        return self.db.query(User).filter(User.email == email.strip().lower()).first()

    def register(self, email: Optional[str], password: Optional[str], name: Optional[str]) -> User:
        """
        Create a new account

        Raises:
            InvalidArgument: If a field is missing
            Conflict: If the email is already registered
        """
        if not email or not password or not name:
            logger.warning(f"Register validation failed: email={email}, has_password={bool(password)}, has_name={bool(name)}")
            raise InvalidArgument("Please provide email, password, and name")

        if self.get_user_by_email(email):
            logger.warning(f"Register failed: email already exists ({email})")
            raise Conflict("Email already exists")

        user = User(
            email=email.strip().lower(),
            password_hash=get_password_hash(password),
            name=name.strip(),
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)

        logger.info(f"Created new user with ID: {user.id}")
        return user

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        """
        Check credentials

        Raises:
            InvalidArgument: If a field is missing
            Unauthorized: If the credentials do not match
        """
        if not email or not password:
            raise InvalidArgument("Please provide email and password")

        user = self.get_user_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Login failed for: {email}")
            raise Unauthorized("Invalid credentials")

        logger.info(f"User logged in successfully: {user.id}")
        return user

    def request_password_reset(self, email: Optional[str]) -> User:
        """
        Look up the account a reset link would be sent to

        No mail is delivered yet; the lookup only confirms the account exists.
        """
        if not email:
            raise InvalidArgument("Please provide email")

        user = self.get_user_by_email(email)
        if not user:
            logger.warning(f"Forgot password: email not found ({email})")
            raise NotFound("Email not found")

        logger.info(f"Password reset requested for user {user.id}")
        return user

    def logout(self, user: User, fcm_token: Optional[str] = None) -> int:
        """Forget the device's push token so the user stops receiving pushes there"""
        removed = user_service.clear_fcm_tokens(self.db, user, fcm_token)
        logger.info(f"User logged out: {user.id} ({removed} device token(s) cleared)")
        return removed

    def create_access_token_for_user(self, user: User) -> str:
        """Create JWT access token for user"""
        return create_access_token(data={"sub": str(user.id)})
