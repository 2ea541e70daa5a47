from enum import Enum
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    """Types of push notifications sent by GoGo."""

    FRIEND_REQUEST = "friend_request"
    FRIEND_REQUEST_ACCEPTED = "friend_request_accepted"
    MESSAGE = "message"


class NotificationPriority(str, Enum):
    """Priority levels for notifications."""

    NORMAL = "normal"
    HIGH = "high"


class PushNotification(BaseModel):
    """A single push notification addressed to one device token."""

    fcm_token: str = Field(..., description="FCM token of the target device")
    title: str = Field(..., description="Notification title")
    body: str = Field(..., description="Notification body")
    notification_type: NotificationType = Field(..., description="Type of notification")
    priority: NotificationPriority = Field(NotificationPriority.HIGH, description="Notification priority")
    data: Optional[Dict[str, Any]] = Field(None, description="Additional data payload")
    channel_id: str = Field("friend_requests", description="Android notification channel")
