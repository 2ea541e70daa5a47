"""
FastAPI dependencies for authentication
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.exceptions import Unauthorized
from app.core.security import decode_access_token
from app.database import get_db
from app.models.user import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _user_from_token(db: Session, token: str) -> Optional[User]:
    payload = decode_access_token(token)
    try:
        user_id = UUID(str(payload["sub"]))
    except ValueError:
        raise ValueError("Invalid token subject")
    return db.query(User).filter(User.id == user_id).first()


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """Resolve the authenticated user from the Bearer token"""
    if credentials is None or not credentials.credentials:
        logger.warning(f"Authentication failed: no token provided ({request.method} {request.url.path})")
        raise Unauthorized("No token provided")

    try:
        user = _user_from_token(db, credentials.credentials)
    except ValueError as e:
        logger.warning(f"Authentication failed: {e}")
        raise Unauthorized("Invalid token")

    if not user:
        logger.warning(f"Authentication failed: user not found ({request.url.path})")
        raise Unauthorized("User not found")

    return user


def get_geocoding_gateway(request: Request):
    """Process-wide geocoding gateway built in the application lifespan"""
    return request.app.state.geocoding
