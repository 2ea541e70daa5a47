import asyncio
import logging
import os
from typing import Any, Dict, Optional

import firebase_admin
from firebase_admin import credentials, messaging
from ..core.config import settings
from ..utils.time_utils import to_utc_isoformat, utc_now
from ..models.notification import (
    NotificationType,
    NotificationPriority,
    PushNotification,
)

logger = logging.getLogger(__name__)


def _mask(token: str) -> str:
    return f"{token[:20]}..."


class FirebaseService:
    """Service for sending Firebase Cloud Messaging push notifications.

    Delivery is best effort: every public method returns a bool and never
    raises. Without credentials the service stays uninitialised and all
    sends return False.
    """

    def __init__(self, credentials_path: Optional[str] = None):
        self._initialized = False
        self._app = None
        self._credentials_path = credentials_path or settings.GOOGLE_APPLICATION_CREDENTIALS
        self._initialize_firebase()

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK."""
        try:
            if firebase_admin._apps:
                self._app = firebase_admin.get_app()
                self._initialized = True
                logger.info("Using existing Firebase Admin SDK instance")
                return

            if not os.path.exists(self._credentials_path):
                logger.warning(
                    f"FCM not initialized: credentials file not found: {self._credentials_path}"
                )
                return

            cred = credentials.Certificate(self._credentials_path)
            self._app = firebase_admin.initialize_app(cred)
            self._initialized = True
            logger.info("Firebase Admin SDK initialized for FCM")

        except Exception as e:
            logger.error(f"Failed to initialize Firebase Admin SDK: {e}")

    def _create_message(self, notification: PushNotification) -> messaging.Message:
        """Create FCM message from notification data."""
        data: Dict[str, Any] = dict(notification.data or {})
        data.update({
            "type": notification.notification_type.value,
            "sent_at": to_utc_isoformat(utc_now()),
        })

        # Convert all data values to strings (FCM requirement)
        data = {k: "" if v is None else str(v) for k, v in data.items()}

        high = notification.priority == NotificationPriority.HIGH

        # Android: show immediately, including on the lock screen
        android_config = messaging.AndroidConfig(
            priority="high" if high else "normal",
            notification=messaging.AndroidNotification(
                title=notification.title,
                body=notification.body,
                sound="default",
                channel_id=notification.channel_id,
                priority="high" if high else "default",
                visibility="public",
                default_sound=True,
                default_vibrate_timings=True,
            )
        )

        ios_config = messaging.APNSConfig(
            headers={"apns-priority": "10" if high else "5"},
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    alert=messaging.ApsAlert(
                        title=notification.title,
                        body=notification.body
                    ),
                    badge=1,
                    sound="default",
                    content_available=True,
                )
            )
        )

        return messaging.Message(
            notification=messaging.Notification(
                title=notification.title,
                body=notification.body,
            ),
            data=data,
            android=android_config,
            apns=ios_config,
            token=notification.fcm_token,
        )

    async def send(self, notification: PushNotification) -> bool:
        """Send one notification; False on any failure."""
        if not self._initialized or not notification.fcm_token:
            logger.warning(
                f"FCM not available or token missing (initialized={self._initialized}, "
                f"has_token={bool(notification.fcm_token)})"
            )
            return False

        try:
            message = self._create_message(notification)
            message_id = await asyncio.to_thread(messaging.send, message)
            logger.info(
                f"FCM notification sent to {_mask(notification.fcm_token)}, message ID: {message_id}"
            )
            return True

        except (messaging.UnregisteredError, messaging.SenderIdMismatchError):
            # Token cleanup is the caller's concern (logout clears tokens)
            logger.warning(f"FCM token is no longer valid: {_mask(notification.fcm_token)}")
            return False

        except Exception as e:
            logger.error(f"Error sending FCM notification to {_mask(notification.fcm_token)}: {e}")
            return False

    async def send_notification(
        self,
        fcm_token: str,
        title: str,
        body: str,
        notification_type: NotificationType,
        data: Optional[Dict[str, Any]] = None,
        channel_id: str = "friend_requests",
    ) -> bool:
        return await self.send(PushNotification(
            fcm_token=fcm_token,
            title=title,
            body=body,
            notification_type=notification_type,
            data=data,
            channel_id=channel_id,
        ))

    async def send_friend_request_notification(
        self, fcm_token: str, requester: Dict[str, Any], request_id: str
    ) -> bool:
        return await self.send_notification(
            fcm_token,
            "New friend request",
            f"{requester['name']} wants to be your friend",
            NotificationType.FRIEND_REQUEST,
            {
                "requestId": request_id,
                "requesterId": requester["id"],
                "requesterName": requester["name"],
                "requesterAvatar": requester.get("avatar") or "",
            },
        )

    async def send_friend_request_accepted_notification(
        self, fcm_token: str, accepter: Dict[str, Any]
    ) -> bool:
        return await self.send_notification(
            fcm_token,
            "Friend request accepted",
            f"{accepter['name']} accepted your friend request",
            NotificationType.FRIEND_REQUEST_ACCEPTED,
            {
                "friendId": accepter["id"],
                "friendName": accepter["name"],
                "friendAvatar": accepter.get("avatar") or "",
            },
        )

    async def send_message_notification(
        self, fcm_token: str, sender_name: str, content: str, data: Dict[str, Any]
    ) -> bool:
        preview = content if len(content) <= 50 else content[:50] + "..."
        return await self.send_notification(
            fcm_token,
            sender_name or "New Message",
            preview,
            NotificationType.MESSAGE,
            data,
            channel_id="messages",
        )


# Global Firebase service instance
firebase_service = FirebaseService()
