"""
Authentication endpoints - email/password accounts and JWT management
"""
from typing import Optional
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.auth import ForgotPasswordRequest, LoginRequest, LogoutRequest, RegisterRequest
from app.schemas.user import UserResponse
from app.services.auth_service import AuthService
from app.core.dependencies import get_current_user
from app.core.rate_limit import AUTH_LIMIT, limiter
from app.models.user import User
from app.utils.responses import created_response, success_response
import logging

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post("/register")
@limiter.limit(AUTH_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    db: Session = Depends(get_db)
):
    """
    Create an account and return a backend JWT

    - **email**, **password**, **name**: all required
    """
    auth_service = AuthService(db)
    user = auth_service.register(payload.email, payload.password, payload.name)
    token = auth_service.create_access_token_for_user(user)
    return created_response(token=token, user=UserResponse.model_validate(user).to_json())


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db)
):
    """Exchange email/password for a backend JWT"""
    auth_service = AuthService(db)
    user = auth_service.authenticate(payload.email, payload.password)
    token = auth_service.create_access_token_for_user(user)
    logger.info(f"Issued token for user {user.id}")
    return success_response(token=token, user=UserResponse.model_validate(user).to_json())


@router.post("/forgot-password")
@limiter.limit(AUTH_LIMIT)
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db)
):
    """Request a password reset link for an email address"""
    AuthService(db).request_password_reset(payload.email)
    return success_response("Password reset link sent to email")


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the authenticated user's profile"""
    return success_response(user=UserResponse.model_validate(current_user).to_json())


@router.post("/logout")
async def logout(
    payload: Optional[LogoutRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """
    Logout user

    The JWT itself is stateless; this forgets the device's push token so the
    logged-out device stops receiving notifications.
    """
    AuthService(db).logout(current_user, payload.fcm_token if payload else None)
    return success_response("Logged out successfully")
