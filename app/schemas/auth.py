"""Authentication schemas"""
from typing import Optional
from pydantic import Field
from app.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    """Fields are optional so that missing values get a friendly 400"""
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LogoutRequest(CamelModel):
    fcm_token: Optional[str] = Field(None, description="Device token to forget; all tokens when omitted")


class ForgotPasswordRequest(CamelModel):
    email: Optional[str] = None
