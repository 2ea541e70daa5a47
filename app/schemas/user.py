"""User schemas for request/response validation"""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import Field
from app.schemas.common import CamelModel


class UserSummary(CamelModel):
    """Public profile fields embedded in other payloads"""
    id: UUID
    name: str = ""
    email: str = ""
    avatar: Optional[str] = None


class UserResponse(UserSummary):
    """Full profile of a user"""
    phone: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserUpdate(CamelModel):
    """Schema for updating user profile"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    avatar: Optional[str] = None


class FCMTokenRegister(CamelModel):
    """Register a device token for push notifications"""
    fcm_token: str = Field(..., min_length=1)
    platform: str = "flutter"
